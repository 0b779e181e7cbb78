from __future__ import annotations

import os
import sys
import time
from typing import Optional

from PySide6.QtCore import QThread, Signal
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton,
    QLabel, QFileDialog, QLineEdit, QProgressBar, QMessageBox, QCheckBox, QComboBox
)

from .config import ExportConfig, resolve_output, resolve_root
from .drives import list_drives
from .models import ScanResult
from .report import ReportWriteError, export_csv
from .scanner import scan
from .utils import format_bytes

APP_NAME = "FileMetaPy"

# -------------------- Style --------------------
DARK_QSS = r"""
* { font-family: "Segoe UI"; font-size: 12px; }

QMainWindow {
    background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
        stop:0 #0b0e14, stop:0.6 #0f1220, stop:1 #0b1020);
}

QWidget { color: #dbe6ff; }
QLabel { color: #dbe6ff; }

QLineEdit, QComboBox {
    background: #121826;
    border: 1px solid #25314a;
    border-radius: 10px;
    padding: 7px 9px;
    selection-background-color: rgba(47, 107, 255, 0.40);
    selection-color: #ffffff;
}

QPushButton {
    background: #16203a;
    border: 1px solid #2a3a5a;
    border-radius: 12px;
    padding: 8px 12px;
    color: #e7efff;
}

QPushButton:hover {
    background: #1a2a4c;
    border-color: #3a5aa8;
}

QPushButton:disabled {
    background: #141a28;
    color: #6a7894;
    border-color: #1d2433;
}

QProgressBar {
    background: #0e1320;
    border: 1px solid #26334d;
    border-radius: 10px;
    text-align: center;
    color: #cfe0ff;
    height: 18px;
}

QProgressBar::chunk {
    background: qlineargradient(x1:0,y1:0,x2:1,y2:0, stop:0 #2f6bff, stop:1 #38d1c5);
    border-radius: 10px;
}
"""


# -------------------- Worker thread --------------------
class ScanThread(QThread):
    progress = Signal(int)           # files processed
    done = Signal(object, int)       # ScanResult, rows written
    failed = Signal(str, object)     # message, ScanResult or None when the scan itself failed

    def __init__(self, cfg: ExportConfig):
        super().__init__()
        self.cfg = cfg
        self._last_emit = 0.0

    def _on_progress(self, files: int):
        # throttled: one signal per file would flood the UI thread
        now = time.time()
        if now - self._last_emit >= 0.10:
            self._last_emit = now
            self.progress.emit(files)

    def run(self):
        try:
            res = scan(self.cfg.root, progress=self._on_progress,
                       track_size=self.cfg.include_size, tz=self.cfg.tz)
            self.progress.emit(res.files)
            try:
                rows = export_csv(res.records, self.cfg.output,
                                  include_size=self.cfg.include_size, tz=self.cfg.tz)
            except ReportWriteError as e:
                self.failed.emit(str(e), res)
                return
            self.done.emit(res, rows)
        except Exception as e:
            self.failed.emit(str(e), None)


# -------------------- Main window --------------------
class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle(f"{APP_NAME} — file metadata exporter")
        self.resize(760, 300)

        self.scan_thread: Optional[ScanThread] = None
        self.last_result: Optional[ScanResult] = None

        central = QWidget()
        self.setCentralWidget(central)
        root = QVBoxLayout(central)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        title = QLabel(APP_NAME)
        tf = QFont(); tf.setPointSize(16); tf.setBold(True)
        title.setFont(tf)
        subtitle = QLabel("scans a folder and exports file metadata to CSV")
        subtitle.setStyleSheet("QLabel{color:#aabce6;}")
        head = QHBoxLayout()
        head.addWidget(title)
        head.addSpacing(10)
        head.addWidget(subtitle, 1)
        root.addLayout(head)

        src_row = QHBoxLayout()
        self.root_edit = QLineEdit()
        self.root_edit.setPlaceholderText("Folder to scan (default = ./)")
        self.drive_combo = QComboBox()
        self.drive_combo.addItem("Volumes…", "")
        for d in list_drives():
            self.drive_combo.addItem(f"{d.mountpoint}  ({format_bytes(d.used)} used)", d.mountpoint)
        btn_folder = QPushButton("Folder…")
        src_row.addWidget(self.root_edit, 1)
        src_row.addWidget(self.drive_combo)
        src_row.addWidget(btn_folder)
        root.addLayout(src_row)

        out_row = QHBoxLayout()
        self.out_edit = QLineEdit()
        self.out_edit.setPlaceholderText("Output CSV (default = file_data.csv)")
        btn_out = QPushButton("Save as…")
        self.cb_size = QCheckBox("Track size")
        self.cb_size.setChecked(True)
        out_row.addWidget(self.out_edit, 1)
        out_row.addWidget(btn_out)
        out_row.addWidget(self.cb_size)
        root.addLayout(out_row)

        run_row = QHBoxLayout()
        self.btn_run = QPushButton("Scan && Export")
        self.progress = QProgressBar()
        self.progress.setRange(0, 1)
        self.progress.setValue(0)
        self.counter = QLabel("Processed files: 0")
        self.counter.setStyleSheet("QLabel{color:#8ea3d6;}")
        run_row.addWidget(self.btn_run)
        run_row.addWidget(self.progress, 1)
        run_row.addWidget(self.counter)
        root.addLayout(run_row)
        root.addStretch(1)

        btn_folder.clicked.connect(self.pick_folder)
        btn_out.clicked.connect(self.pick_output)
        self.drive_combo.activated.connect(self.on_drive_picked)
        self.btn_run.clicked.connect(self.start_scan)

        self.statusBar().showMessage("Ready.")

    def pick_folder(self):
        p = QFileDialog.getExistingDirectory(self, "Folder to scan", os.path.expanduser("~"))
        if p:
            self.root_edit.setText(p)

    def pick_output(self):
        p, _ = QFileDialog.getSaveFileName(self, "Export to", os.path.expanduser("~/file_data.csv"), "CSV (*.csv)")
        if p:
            self.out_edit.setText(p)

    def on_drive_picked(self, index: int):
        mp = self.drive_combo.itemData(index)
        if mp:
            self.root_edit.setText(mp)

    def current_config(self) -> ExportConfig:
        return ExportConfig(
            root=resolve_root(self.root_edit.text()),
            output=resolve_output(self.out_edit.text()),
            include_size=self.cb_size.isChecked(),
        )

    def start_scan(self):
        if self.scan_thread and self.scan_thread.isRunning():
            return
        cfg = self.current_config()
        self.btn_run.setEnabled(False)
        self.progress.setRange(0, 0)  # busy: total is unknown up front
        self.counter.setText("Processed files: 0")
        self.statusBar().showMessage(f"Scanning {cfg.root} …")

        self.scan_thread = ScanThread(cfg)
        self.scan_thread.progress.connect(self.on_scan_progress)
        self.scan_thread.done.connect(self.on_scan_done)
        self.scan_thread.failed.connect(self.on_scan_failed)
        self.scan_thread.start()

    def on_scan_progress(self, files: int):
        self.counter.setText(f"Processed files: {files}")

    def _finish(self, result: Optional[ScanResult]):
        self.btn_run.setEnabled(True)
        self.progress.setRange(0, 1)
        self.progress.setValue(1)
        if result is None:
            return
        self.last_result = result
        self.counter.setText(f"Total files: {result.files}")

    def on_scan_done(self, result: ScanResult, rows: int):
        self._finish(result)
        out = self.scan_thread.cfg.output if self.scan_thread else ""
        self.statusBar().showMessage(
            f"Exported {rows} rows to {out} ({format_bytes(result.bytes_scanned)}, {result.elapsed_sec:.1f} sec)"
        )

    def on_scan_failed(self, msg: str, result: Optional[ScanResult]):
        self._finish(result)
        self.progress.setValue(0)
        if result is None:
            self.statusBar().showMessage("Scan failed.")
            QMessageBox.critical(self, "Scan failed", msg)
            return
        self.statusBar().showMessage("Export failed.")
        QMessageBox.critical(self, "Error exporting to CSV", msg)


def run() -> int:
    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setStyleSheet(DARK_QSS)
    w = MainWindow()
    w.show()
    return app.exec()
