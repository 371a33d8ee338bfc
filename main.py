"""
Main entry point for the application

Usage:
    python main.py <comments.csv> [--output result.json] [--offline]

This runs the complete analysis for one CSV export:
1. Load comments from the CSV (comment columns are detected automatically)
2. Discover themes and classify every comment into one of them
3. Rank themes by business impact and count sentiment

Use --offline to skip Gemini and classify with the built-in keyword themes.
"""
import json
import sys

from layer_1_data_import.csv_loader import load_comments_csv
from pipeline import analyze_comments
from utils.logger import get_logger

logger = get_logger(__name__)


def main(argv=None) -> int:
    """
    Run the analysis for the CSV named on the command line

    Returns:
        0 on success, 1 on failure, 2 on bad usage
    """
    args = list(sys.argv[1:] if argv is None else argv)
    offline = "--offline" in args
    args = [arg for arg in args if arg != "--offline"]

    output_path = None
    if "--output" in args or "-o" in args:
        flag = "--output" if "--output" in args else "-o"
        position = args.index(flag)
        if position + 1 >= len(args):
            logger.error(f"{flag} requires a file path")
            return 2
        output_path = args[position + 1]
        del args[position:position + 2]

    if len(args) != 1:
        logger.error("Usage: python main.py <comments.csv> [--output result.json] [--offline]")
        return 2

    csv_path = args[0]
    logger.info("=" * 60)
    logger.info("Comment Theme Analyser - Starting")
    logger.info("=" * 60)

    try:
        raw_texts = load_comments_csv(csv_path)
    except (OSError, ValueError) as e:
        logger.error(f"File processing failed: {e}")
        return 1

    response = analyze_comments(raw_texts, use_llm=not offline)
    if not response["success"]:
        logger.error(response["error"])
        return 1

    data = response["data"]
    logger.info("\n" + "=" * 60)
    logger.info(
        f"✅ Analysed {data['total_comments']} comments into {data['metadata']['total_topics']} themes "
        f"(AI enhanced: {data['metadata']['ai_enhanced']})"
    )
    for topic in data["topics"]:
        logger.info(
            f"  {topic['topic_id']}. {topic['title']}: {topic['volume']} comments "
            f"({topic['percentage']}%), {topic['sentiment']['classification']}, "
            f"impact {topic['business_impact']}"
        )
    logger.info("=" * 60)

    if output_path:
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Results written to {output_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
