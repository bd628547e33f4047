import logging
import threading
import tkinter as tk
from tkinter import ttk, filedialog, messagebox

from mpegaudio.errors import PositionalError
from mpegaudio.header import ParseMode
from mpegaudio.pipeline import read_from_path, scan_directory
from mpegaudio.verify import compare_with_decoder

PARSE_MODES = {
    "Prefer VBR headers (fast)": ParseMode.PREFER_VBR_HEADERS,
    "Ignore VBR headers (scan all frames)": ParseMode.IGNORE_VBR_HEADERS,
}
AUDIO_FILETYPES = [("MPEG audio", "*.mp3 *.mp2 *.mp1"), ("All files", "*.*")]


class InspectorGUI(tk.Tk):
    def __init__(self):
        super().__init__()
        self.title("MPEG Audio Header Inspector")
        self.geometry("880x600")
        self.resizable(True, True)

        nb = ttk.Notebook(self)
        self.file_tab = ttk.Frame(nb)
        self.folder_tab = ttk.Frame(nb)
        nb.add(self.file_tab, text="File")
        nb.add(self.folder_tab, text="Folder")
        nb.pack(fill=tk.BOTH, expand=True)

        self.mode_var = tk.StringVar(value=next(iter(PARSE_MODES)))
        self.strict_var = tk.BooleanVar(value=False)

        self._build_file_tab()
        self._build_folder_tab()

    def _options_row(self, f, row: int):
        pad = {"padx": 8, "pady": 6}
        ttk.Label(f, text="Parse mode:").grid(row=row, column=0, sticky="w", **pad)
        ttk.Combobox(f, textvariable=self.mode_var, values=list(PARSE_MODES), width=40,
                     state="readonly").grid(row=row, column=1, sticky="w", **pad)
        ttk.Checkbutton(f, text="Strict (no resync over garbage)",
                        variable=self.strict_var).grid(row=row, column=2, sticky="w", **pad)

    def _parse_options(self):
        return PARSE_MODES[self.mode_var.get()], bool(self.strict_var.get())

    # ---------------- FILE TAB ----------------
    def _build_file_tab(self):
        f = self.file_tab
        pad = {"padx": 8, "pady": 6}

        ttk.Label(f, text="Audio file:").grid(row=0, column=0, sticky="w", **pad)
        self.path_var = tk.StringVar()
        ttk.Entry(f, textvariable=self.path_var, width=70).grid(row=0, column=1, **pad)
        ttk.Button(f, text="Browse...", command=self._pick_file).grid(row=0, column=2, **pad)

        self._options_row(f, 1)

        btn_frame = ttk.Frame(f); btn_frame.grid(row=2, column=0, columnspan=3, sticky="w", **pad)
        ttk.Button(btn_frame, text="Read Header", command=self._read_header).pack(side=tk.LEFT, padx=5)
        ttk.Button(btn_frame, text="Verify with Decoder", command=self._verify).pack(side=tk.LEFT, padx=5)

        ttk.Label(f, text="Header:").grid(row=3, column=0, sticky="nw", **pad)
        self.file_log = tk.Text(f, height=16); self.file_log.grid(row=3, column=1, columnspan=2, sticky="nsew", **pad)
        f.rowconfigure(3, weight=1); f.columnconfigure(1, weight=1)

    def _pick_file(self):
        p = filedialog.askopenfilename(title="Select MPEG audio file", filetypes=AUDIO_FILETYPES)
        if p: self.path_var.set(p)

    def _append_log(self, txt: str):
        self.after(0, self._insert, self.file_log, txt)

    def _insert(self, widget: tk.Text, txt: str):
        widget.insert(tk.END, txt + "\n"); widget.see(tk.END)

    def _read_header(self):
        path = self.path_var.get().strip()
        if not path:
            messagebox.showwarning("Missing", "Please choose an audio file."); return
        parse_mode, strict = self._parse_options()

        self._append_log(f"Reading {path} ...")
        def task():
            try:
                header = read_from_path(path, parse_mode, strict=strict)
                for line in header.summary_lines():
                    self._append_log("  " + line)
            except PositionalError as pe:
                self._append_log(f"Error: {pe}")
        threading.Thread(target=task, daemon=True).start()

    def _verify(self):
        path = self.path_var.get().strip()
        if not path:
            messagebox.showwarning("Missing", "Please choose an audio file."); return
        parse_mode, strict = self._parse_options()

        self._append_log("Decoding for comparison ...")
        def task():
            try:
                header = read_from_path(path, parse_mode, strict=strict)
            except PositionalError as pe:
                self._append_log(f"Error: {pe}"); return
            res = compare_with_decoder(path, header)
            if res is None:
                self._append_log("Decoder unavailable (pydub + ffmpeg required)")
                return
            self._append_log(f"  Header samples:  {res['header_samples']}")
            self._append_log(f"  Decoded samples: {res['decoded_samples']}")
            self._append_log(f"  Delta: {res['delta_samples']} samples ({res['delta_ms'] or 0:.2f} ms)")
        threading.Thread(target=task, daemon=True).start()

    # ---------------- FOLDER TAB ----------------
    def _build_folder_tab(self):
        f = self.folder_tab
        pad = {"padx": 8, "pady": 6}

        ttk.Label(f, text="Folder:").grid(row=0, column=0, sticky="w", **pad)
        self.dir_var = tk.StringVar()
        ttk.Entry(f, textvariable=self.dir_var, width=70).grid(row=0, column=1, **pad)
        ttk.Button(f, text="Browse...", command=self._pick_dir).grid(row=0, column=2, **pad)

        self._options_row(f, 1)
        ttk.Button(f, text="Scan Folder", command=self._scan).grid(row=2, column=1, sticky="w", **pad)

        ttk.Label(f, text="Results:").grid(row=3, column=0, sticky="nw", **pad)
        self.folder_log = tk.Text(f, height=16)
        self.folder_log.grid(row=3, column=1, columnspan=2, sticky="nsew", **pad)
        f.rowconfigure(3, weight=1); f.columnconfigure(1, weight=1)

    def _pick_dir(self):
        p = filedialog.askdirectory(title="Select folder")
        if p: self.dir_var.set(p)

    def _append_folder_log(self, txt: str):
        self.after(0, self._insert, self.folder_log, txt)

    def _scan(self):
        root = self.dir_var.get().strip()
        if not root:
            messagebox.showwarning("Missing", "Please choose a folder."); return
        parse_mode, strict = self._parse_options()

        self._append_folder_log(f"Scanning {root} ...")
        def task():
            count = failed = 0
            for path, res in scan_directory(root, parse_mode, strict=strict):
                count += 1
                if isinstance(res, PositionalError):
                    failed += 1
                    self._append_folder_log(f"{path}: ERROR {res}")
                else:
                    self._append_folder_log(
                        f"{path}: {res.total_seconds:.3f} s, {res.avg_bitrate_bps or 0} bps, "
                        f"{res.source.name.lower()}")
            self._append_folder_log(f"Done. {count} files, {failed} failed.")
        threading.Thread(target=task, daemon=True).start()


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = InspectorGUI(); app.mainloop()

if __name__ == "__main__":
    main()
