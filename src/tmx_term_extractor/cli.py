"""Command-line interface for TMX Term Extractor."""

from __future__ import annotations

import asyncio
import argparse
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from .config import ExtractorConfig, DEFAULT_DATASET_INFO_FILENAME
from .chunker import DEFAULT_MAX_TOKENS_PER_CHUNK, chunk_document
from .exceptions import InputError
from .exporter import save_terms, SUPPORTED_FORMATS
from .llm_client import DEFAULT_BASE_URL, DEFAULT_MODEL, create_client, make_extractor, check_connectivity
from .models import ChunkEvent
from .processor import DEFAULT_BACKOFF_BASE, DEFAULT_MAX_RETRIES, map_progress, run_extraction
from .progress import (
    ExtractionProgress,
    get_progress_file,
    load_progress,
    delete_progress,
)
from .tmx_parser import load_tmx, validate_tmx_file


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract bilingual terminology from TMX files with an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s memory.tmx                        # Basic extraction
  %(prog)s memory.tmx -o terms.csv           # Specify output
  %(prog)s memory.tmx -d "Medical devices"   # Describe the dataset
  %(prog)s memory.tmx --format json          # JSON output
  %(prog)s memory.tmx --resume               # Resume interrupted extraction
        """
    )

    # Positional arguments
    parser.add_argument("input_path", help="Input TMX file path")
    parser.add_argument("output_path", nargs='?', default=None, help="Output file path")
    parser.add_argument("-o", "--output", dest="output_option", default=None, help="Output file path")

    # Dataset description
    parser.add_argument("-d", "--dataset-info", default="", help="Free-text description of the dataset")
    parser.add_argument("--dataset-info-file", help="Read the dataset description from a file")

    # API options
    parser.add_argument("--api-key", help="API key (or set GEMINI_API_KEY)")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--model", dest="model_name", default=DEFAULT_MODEL)
    parser.add_argument("--timeout", type=float, default=120.0, help="Request timeout in seconds")
    parser.add_argument("--check-api", action="store_true", help="Run a test extraction before processing")

    # Processing
    parser.add_argument(
        "--max-tokens", type=int, default=DEFAULT_MAX_TOKENS_PER_CHUNK,
        help="Estimated token budget per chunk"
    )
    parser.add_argument(
        "--max-retries", type=int, default=DEFAULT_MAX_RETRIES,
        help="Retries per chunk after the first attempt"
    )
    parser.add_argument(
        "--backoff", dest="backoff_base", type=float, default=DEFAULT_BACKOFF_BASE,
        help="Base retry delay in seconds (doubles on each retry)"
    )

    # Output
    parser.add_argument("--format", dest="output_format", choices=SUPPORTED_FORMATS, default="csv")

    # Progress
    parser.add_argument("--resume", action="store_true", help="Resume from saved progress")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress saving")

    # Misc
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser.parse_args(argv)


def load_dataset_info(args: argparse.Namespace) -> str:
    """Resolve the dataset description from flags or the default file."""
    logger = logging.getLogger(__name__)

    if args.dataset_info_file:
        path = Path(args.dataset_info_file).expanduser().resolve()
        return path.read_text(encoding="utf-8").strip()

    if args.dataset_info:
        return args.dataset_info.strip()

    if Path(DEFAULT_DATASET_INFO_FILENAME).exists():
        logger.info(f"Auto-detected '{DEFAULT_DATASET_INFO_FILENAME}'")
        return Path(DEFAULT_DATASET_INFO_FILENAME).read_text(encoding="utf-8").strip()

    return ""


def _log_event(event: ChunkEvent) -> None:
    if event.kind == "failed":
        tqdm.write(f"Chunk {event.chunk_index + 1} failed: {event.message}")


async def main_async(args: argparse.Namespace) -> int:
    """Main async workflow."""
    logger = logging.getLogger(__name__)
    config = ExtractorConfig.from_args(args)

    # 验证配置
    error = config.validate()
    if error:
        logger.error(error)
        return 1

    # 验证输入文件
    in_path = Path(args.input_path).expanduser().resolve()
    error = validate_tmx_file(in_path)
    if error:
        logger.error(error)
        return 1

    logger.info(f"Reading: {in_path}")
    try:
        document = load_tmx(in_path)
    except InputError as e:
        logger.error(f"Failed to parse TMX file: {e}")
        return 1

    dataset_info = load_dataset_info(args)

    # 进度管理
    progress_path = get_progress_file(in_path) if config.save_progress else None
    checkpoint = None

    if args.resume and progress_path:
        checkpoint = load_progress(progress_path)
        if checkpoint:
            logger.info(f"Loaded progress: {checkpoint.completion_rate:.0%} complete")
        else:
            logger.info("No previous progress found, starting fresh")

    if checkpoint is None and progress_path:
        total_chunks = len(chunk_document(document, config.max_tokens_per_chunk))
        checkpoint = ExtractionProgress.create(
            str(in_path), total_chunks, config.max_tokens_per_chunk
        )

    client = create_client(config.api_key, config.base_url, config.timeout)

    output = args.output_path or args.output_option
    if output:
        out_path = Path(output)
    else:
        out_path = in_path.with_name(f"{config.output_prefix}{in_path.stem}.{config.output_format}")

    with tqdm(total=100, desc="Extracting", unit="%") as bar:
        def set_progress(value: int) -> None:
            # 进度只增不减
            if value > bar.n:
                bar.update(value - bar.n)

        set_progress(10)

        if args.check_api:
            set_progress(15)
            try:
                await check_connectivity(client, config.model_name)
            except Exception as e:
                logger.error(f"API connectivity test failed: {e}")
                return 1

        set_progress(20)
        result = await run_extraction(
            document,
            dataset_info,
            make_extractor(client),
            config.model_name,
            config.max_tokens_per_chunk,
            on_progress=lambda p: set_progress(map_progress(p)),
            on_event=_log_event,
            max_retries=config.max_retries,
            backoff_base=config.backoff_base,
            checkpoint=checkpoint,
            checkpoint_path=progress_path,
        )

        save_terms(result.pairs, out_path, config.output_format)
        set_progress(100)

    if result.is_empty:
        logger.warning(
            "The process completed, but no terminology was extracted. "
            "Try adjusting the dataset info or using a different model."
        )

    # 清理进度文件
    if progress_path and progress_path.exists():
        delete_progress(progress_path)

    logger.info(
        f"Done! {len(result.pairs)} unique terms from "
        f"{result.succeeded_chunks}/{result.total_chunks} chunks. Saved to {out_path}"
    )
    return 0


def main() -> None:
    """CLI entry point."""
    args = parse_arguments()
    setup_logging(args.verbose)

    try:
        exit_code = asyncio.run(main_async(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        if args.no_progress:
            print("\nInterrupted by user.")
        else:
            print("\nInterrupted by user. Progress saved.")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
