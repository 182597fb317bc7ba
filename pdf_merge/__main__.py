import argparse
import logging
import sys

from PySide6.QtWidgets import QApplication

from pdf_merge.dialogs import ProgressReporter, QtPicker, show_error, show_result
from pdf_merge.merge import DestinationExists, MergeError, NoPagesProduced, run

logger = logging.getLogger('pdf_merge')


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='pdf-merge',
        description='选择多个 PDF 文件，按选择顺序合并为输出目录下的 Merged.pdf'
    )
    parser.add_argument('--force', action='store_true',
                        help='输出目录中已存在 Merged.pdf 时覆盖它')
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    _ = QApplication.instance() or QApplication(sys.argv)

    picker = QtPicker()
    progress = ProgressReporter()

    try:
        output_path = run(picker, overwrite=args.force, progress=progress)
    except NoPagesProduced as e:
        logger.error('%s', e)
        show_error('没有页面', str(e), warning=True)
        return 1
    except DestinationExists as e:
        logger.error('%s', e)
        show_error('输出文件已存在', str(e))
        return 1
    except MergeError as e:
        logger.exception('合并失败')
        show_error('合并失败', str(e))
        return 1
    finally:
        progress.close()

    if output_path is None:
        return 0

    show_result(output_path)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
