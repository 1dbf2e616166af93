"""
Command Line Interface for rect_ocr
"""

import argparse
import logging
import sys
from pathlib import Path

from PIL import Image

from .config import DetectorConfig, RecognizerConfig
from .pipeline import OCRPipeline
from .utils import iter_rects


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect and recognize text lines in an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print every text region and its text
  python -m rect_ocr.cli page.png --det-model det.onnx --rec-model rec.onnx --dict keys.txt

  # Only list the detected rectangles
  python -m rect_ocr.cli page.png --det-model det.onnx --rec-model rec.onnx --dict keys.txt --regions-only
        """
    )

    parser.add_argument('input', type=str, help='Input image file path')
    parser.add_argument('--det-model', type=str, required=True, help='Detection ONNX model')
    parser.add_argument('--rec-model', type=str, required=True, help='Recognition ONNX model')
    parser.add_argument('--dict', type=str, required=True, help='Character dictionary file')

    parser.add_argument(
        '--border',
        type=int,
        default=DetectorConfig.rect_border_size,
        help='Pixels added around each detected region (default: %(default)s)'
    )
    parser.add_argument(
        '--min-score',
        type=float,
        default=RecognizerConfig.min_score,
        help='Minimum character confidence (default: %(default)s)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Threads used to recognize regions (default: sequential)'
    )
    parser.add_argument(
        '--regions-only',
        action='store_true',
        help='Skip recognition and print the detected rectangles'
    )
    parser.add_argument(
        '--gpu',
        action='store_true',
        help='Enable CUDA acceleration when available'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )
    return parser


def main(argv=None):
    """Main CLI entry point"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file '{args.input}' not found", file=sys.stderr)
        return 1

    try:
        det_config = DetectorConfig(rect_border_size=args.border, use_gpu=args.gpu)
        rec_config = RecognizerConfig(min_score=args.min_score, use_gpu=args.gpu)
        pipeline = OCRPipeline(
            args.det_model,
            args.rec_model,
            args.dict,
            det_config=det_config,
            rec_config=rec_config,
            max_workers=args.workers,
        )

        with Image.open(input_path) as image:
            image = image.convert("RGB")

        if args.regions_only:
            rects = pipeline.text_detector.find_text_rect(image)
            for left, top, width, height in iter_rects(rects):
                print(f"{left},{top},{width},{height}")
        else:
            results = pipeline.ocr(image)
            boxes = iter_rects(rect for rect, _ in results)
            for (left, top, width, height), (_, text) in zip(boxes, results):
                print(f"{left},{top},{width},{height}\t{text}")

        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"\nError: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
