from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QApplication, QFileDialog, QMessageBox, QProgressDialog, QWidget

from pdf_merge.merge import Cancelled, Selected, Selection


class QtPicker:
    """
    使用 QFileDialog 让用户选择输出目录和输入文件
    """
    def __init__(self, parent: QWidget | None = None):
        self.parent = parent

    def pick_directory(self) -> Selection:
        folder = QFileDialog.getExistingDirectory(self.parent, '选择输出目录', '')
        if not folder:
            return Cancelled()
        return Selected([folder])

    def pick_files(self) -> Selection:
        files, _ = QFileDialog.getOpenFileNames(
            self.parent,
            '选择要合并的 PDF 文件',
            '',
            'PDF 文件 (*.pdf)'
        )
        if not files:
            return Cancelled()
        return Selected(list(files))


class ProgressReporter:
    """
    用 QProgressDialog 显示合并进度（0~100）
    """
    def __init__(self, parent: QWidget | None = None):
        self.dialog = QProgressDialog('正在合并 PDF 文件...', '', 0, 100, parent)
        self.dialog.setWindowTitle('pdf-merge')
        # 合并过程不支持中途取消
        self.dialog.setCancelButton(None)
        self.dialog.setMinimumDuration(0)
        self.dialog.setAutoClose(True)
        # 构造时会启动强制显示的计时器，选择文件期间不应弹出
        self.dialog.reset()

    def __call__(self, percent: float) -> None:
        self.dialog.setValue(int(percent))
        QApplication.processEvents()

    def close(self) -> None:
        self.dialog.close()


def show_error(title: str, message: str, warning: bool = False) -> None:
    if warning:
        QMessageBox.warning(None, title, message)
    else:
        QMessageBox.critical(None, title, message)


def show_result(path: str) -> bool:
    """
    告知用户输出路径，并询问是否用系统默认程序打开

    返回是否打开了文件
    """
    answer = QMessageBox.question(
        None,
        '合并完成',
        f'已保存到:\n{path}\n\n是否立即打开？',
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
    )
    if answer != QMessageBox.StandardButton.Yes:
        return False

    return QDesktopServices.openUrl(QUrl.fromLocalFile(path))
