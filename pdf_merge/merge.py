import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Callable, Protocol, TypeAlias

import pymupdf as pdf

logger = logging.getLogger(__name__)

OUTPUT_NAME = 'Merged.pdf'

Progress: TypeAlias = Callable[[float], None]


@dataclass
class Selected:
    paths: list[str] = field(default_factory=list)


@dataclass
class Cancelled:
    pass


Selection: TypeAlias = Selected | Cancelled


class Picker(Protocol):
    def pick_directory(self) -> Selection: ...

    def pick_files(self) -> Selection: ...


@dataclass(frozen=True)
class MergeRequest:
    output_path: str
    overwrite: bool
    input_paths: tuple[str, ...]


class MergeError(Exception):
    """
    合并过程中所有会中止本次运行的错误的基类
    """


class DestinationExists(MergeError):
    def __init__(self, path: str, detail: str | None = None):
        if detail is None:
            super().__init__(f'输出文件已存在: {path}（使用 --force 覆盖）')
        else:
            super().__init__(f'无法覆盖已存在的输出文件 {path}: {detail}')
        self.path = path
        self.detail = detail


class UnreadablePdf(MergeError):
    def __init__(self, path: str, detail: str):
        super().__init__(f'无法读取 PDF 文件 {path}: {detail}')
        self.path = path
        self.detail = detail


class NoPagesProduced(MergeError):
    def __init__(self):
        super().__init__('没有可合并的页面，未写入任何文件')


class SaveFailure(MergeError):
    def __init__(self, path: str, detail: str):
        super().__init__(f'保存 {path} 失败: {detail}')
        self.path = path
        self.detail = detail


def default_directory() -> str:
    """
    当前运行程序所在的目录，作为未选择输出目录时的默认值
    """
    return os.path.dirname(os.path.abspath(sys.argv[0]))


def resolve_destination(selection: Selection, overwrite: bool, default_dir: str) -> str:
    """
    根据目录选择结果计算输出路径，并处理已存在文件的覆盖策略
    """
    if isinstance(selection, Selected) and selection.paths:
        folder = selection.paths[0]
    else:
        logger.info('未选择输出目录，使用默认目录 %s', default_dir)
        folder = default_dir

    output_path = os.path.join(folder, OUTPUT_NAME)

    if os.path.exists(output_path):
        if not overwrite:
            raise DestinationExists(output_path)
        logger.info('删除已存在的输出文件 %s', output_path)
        try:
            os.remove(output_path)
        except OSError as e:
            raise DestinationExists(output_path, str(e)) from e

    return output_path


def collect_sources(selection: Selection) -> list[str] | None:
    """
    取出用户选择的输入文件；取消或未选择时返回 None
    """
    if isinstance(selection, Cancelled) or not selection.paths:
        return None
    # 保持对话框给出的顺序，不要排序
    return list(selection.paths)


def open_source(path: str) -> pdf.Document:
    try:
        doc = pdf.open(path, filetype='pdf')
    except Exception as e:
        raise UnreadablePdf(path, str(e)) from e

    if doc.needs_pass:
        doc.close()
        raise UnreadablePdf(path, '文件已加密')

    return doc


def accumulate(out: pdf.Document, paths: list[str] | tuple[str, ...],
               progress: Progress | None = None) -> int:
    """
    依次打开每个输入文件，把其中所有页面按原顺序追加到 out 中

    任何一个文件读取失败都会立即抛出 UnreadablePdf，剩余文件不再处理
    """
    total = len(paths)
    for index, path in enumerate(paths, 1):
        with open_source(path) as src:
            # 没有页面的文件直接跳过，insert_pdf 会把空页面树当作损坏
            if src.page_count > 0:
                try:
                    out.insert_pdf(src)
                except Exception as e:
                    raise UnreadablePdf(path, str(e)) from e
            logger.debug('已追加 %s 的 %d 页', path, src.page_count)

        if progress is not None:
            progress(index / total * 100)

    return out.page_count


def finalize(out: pdf.Document, output_path: str) -> str:
    if out.page_count == 0:
        raise NoPagesProduced()

    try:
        out.save(output_path, garbage=3, deflate=True)
    except Exception as e:
        # 不留下写了一半的文件
        if os.path.exists(output_path):
            os.remove(output_path)
        raise SaveFailure(output_path, str(e)) from e

    logger.info('已写入 %s，共 %d 页', output_path, out.page_count)
    return output_path


def merge(request: MergeRequest, progress: Progress | None = None) -> str:
    with pdf.open() as out:
        accumulate(out, request.input_paths, progress)
        return finalize(out, request.output_path)


def run(picker: Picker, overwrite: bool = False, default_dir: str | None = None,
        progress: Progress | None = None) -> str | None:
    """
    完整执行一次合并：选择输出目录 -> 选择输入文件 -> 合并 -> 保存

    返回输出文件路径；用户没有选择任何输入文件时返回 None
    """
    if default_dir is None:
        default_dir = default_directory()

    output_path = resolve_destination(picker.pick_directory(), overwrite, default_dir)

    input_paths = collect_sources(picker.pick_files())
    if input_paths is None:
        logger.info('未选择任何 PDF 文件')
        return None

    logger.info('开始合并 %d 个文件到 %s', len(input_paths), output_path)
    request = MergeRequest(output_path, overwrite, tuple(input_paths))
    return merge(request, progress)
