"""pdf_merge 测试共用的 fixture"""
import os
from pathlib import Path
from typing import Callable

import pymupdf as pdf
import pytest

from pdf_merge.merge import Cancelled, Selection

# Qt 组件在没有显示器的环境下也要能创建
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')


class FakePicker:
    """
    按预设结果回答两个选择对话框，并记录调用顺序
    """

    def __init__(self, directory: Selection | None = None, files: Selection | None = None):
        self.directory = directory if directory is not None else Cancelled()
        self.files = files if files is not None else Cancelled()
        self.calls: list[str] = []

    def pick_directory(self) -> Selection:
        self.calls.append('directory')
        return self.directory

    def pick_files(self) -> Selection:
        self.calls.append('files')
        return self.files


@pytest.fixture
def fake_picker() -> type[FakePicker]:
    return FakePicker


@pytest.fixture
def make_pdf(tmp_path: Path) -> Callable[..., str]:
    """
    生成一个 PDF，每个标签占一页，作为该页的文字
    """

    def _make(name: str, labels: list[str], **save_options) -> str:
        path = tmp_path / name
        doc = pdf.open()
        for label in labels:
            page = doc.new_page()
            page.insert_text((72, 72), label)
        doc.save(str(path), **save_options)
        doc.close()
        return str(path)

    return _make


# 页面树为空的合法 PDF，pymupdf 自己无法保存这样的文件
EMPTY_PDF = (
    b'%PDF-1.4\n'
    b'1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n'
    b'2 0 obj<</Type/Pages/Kids[]/Count 0>>endobj\n'
    b'trailer<</Root 1 0 R>>\n'
    b'%%EOF\n'
)


@pytest.fixture
def make_empty_pdf(tmp_path: Path) -> Callable[[str], str]:
    def _make(name: str) -> str:
        path = tmp_path / name
        path.write_bytes(EMPTY_PDF)
        return str(path)

    return _make


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    path = tmp_path / 'out'
    path.mkdir()
    return path


def page_labels(path: str | Path) -> list[str]:
    with pdf.open(str(path)) as doc:
        return [page.get_text().strip() for page in doc]


@pytest.fixture
def read_labels() -> Callable[[str | Path], list[str]]:
    return page_labels
