"""
slidemap CLI

Main entry point: outline and content-map generation, deck building and
cover colour estimation.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from . import config
from .modules.errors import InputFileError, SlidemapError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
    )


def _load_json(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise InputFileError(f"Cannot read {path}: {e}") from e


def _write_json(data, output: str) -> Path:
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path


def _load_template(args):
    """Template from --template FILE, --template-id ID or the catalog default."""
    from .modules.template_catalog import TemplateCatalog, load_template_file

    if getattr(args, "template", None):
        return load_template_file(args.template)
    catalog = TemplateCatalog(args.templates_dir)
    if getattr(args, "template_id", None):
        return catalog.get(args.template_id)
    return catalog.default()


def _provider(args):
    from .modules.llm_provider import get_provider
    return get_provider(args.provider, args.model)


def cmd_outline(args):
    """Generate a slide outline for a subject."""
    from .modules.outline_generator import OutlineGenerator, save_outline

    items = OutlineGenerator(_provider(args)).generate(args.subject)

    print("\n" + "=" * 60)
    for i, item in enumerate(items, 1):
        print(f"{i}. {item.title}")
        for bullet in item.bullets:
            print(f"   - {bullet}")
    print("=" * 60)

    if args.output:
        save_outline(items, args.output)
        print(f"\nOutline saved to: {args.output}")


def cmd_content_map(args):
    """Expand an outline JSON file into a content map."""
    from .modules.content_generator import ContentMapGenerator
    from .modules.image_search import ImageSearch
    from .modules.outline_generator import load_outline

    outline = load_outline(args.outline)
    image_search = None if args.no_images else ImageSearch()
    content_map = ContentMapGenerator(_provider(args), image_search=image_search).generate(outline)

    data = {"contentMap": content_map.to_dict()}
    if args.output:
        path = _write_json(data, args.output)
        print(f"Content map saved to: {path}")
    else:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_build(args):
    """Build a deck from a content map JSON file."""
    from .modules.deck_assembler import generate_deck

    template = _load_template(args)
    artifact = generate_deck(_load_json(args.content_map), template)
    path = artifact.save(args.output_dir)

    print(f"\nPresentation saved to: {path}")
    print(f"Slides: {artifact.slide_count}")
    if artifact.skipped:
        print(f"Skipped (no layout in template): {', '.join(artifact.skipped)}")
    for error in artifact.errors:
        print(f"Warning: {error}")


def cmd_generate(args):
    """Full workflow: subject -> outline -> content map -> deck."""
    from .modules.content_generator import ContentMapGenerator
    from .modules.deck_assembler import DeckAssembler
    from .modules.image_search import ImageSearch
    from .modules.outline_generator import OutlineGenerator

    template = _load_template(args)
    provider = _provider(args)

    print(f"\nSubject: {args.subject}")
    print("Generating outline...")
    outline = OutlineGenerator(provider).generate(args.subject)

    print("Generating content map...")
    image_search = None if args.no_images else ImageSearch()
    content_map = ContentMapGenerator(provider, image_search=image_search).generate(outline)

    print("Building presentation...")
    artifact = DeckAssembler().assemble(content_map, template)
    path = artifact.save(args.output_dir)
    print(f"\nPresentation saved to: {path}")


def cmd_colors(args):
    """Estimate the background gradient of an image."""
    from .modules.color_estimator import estimate_image_gradient

    gradient = estimate_image_gradient(args.image)
    print(gradient.css())


def cmd_config(args):
    """Show configuration status."""
    config.print_config_status()


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="slidemap",
        description="Template-driven slide deck generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate an outline
  python -m slidemap outline "Renewable energy in Indonesia" -o outline.json

  # Expand it into a content map
  python -m slidemap content-map outline.json -o content_map.json

  # Render a deck with a catalog template
  python -m slidemap build content_map.json --template-id ocean

  # Full workflow
  python -m slidemap generate "Electric cars vs petrol cars"
"""
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show tracebacks on errors"
    )
    parser.add_argument(
        "--provider",
        default=config.DEFAULT_PROVIDER,
        choices=["cohere", "anthropic", "litellm"],
        help="LLM provider for outline and content generation"
    )
    parser.add_argument(
        "--model", "-m",
        help="Model id for the LLM provider"
    )
    parser.add_argument(
        "--templates-dir",
        default=str(config.TEMPLATES_DIR),
        help="Path to the template catalog directory"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Outline command
    outline_parser = subparsers.add_parser(
        "outline",
        help="Generate a slide outline for a subject"
    )
    outline_parser.add_argument("subject", help="What the presentation is about")
    outline_parser.add_argument(
        "--output", "-o",
        help="Output file for outline JSON"
    )
    outline_parser.set_defaults(func=cmd_outline)

    # Content map command
    content_map_parser = subparsers.add_parser(
        "content-map",
        help="Expand an outline JSON file into a content map"
    )
    content_map_parser.add_argument("outline", help="Path to outline JSON file")
    content_map_parser.add_argument(
        "--output", "-o",
        help="Output file for content map JSON"
    )
    content_map_parser.add_argument(
        "--no-images",
        action="store_true",
        help="Skip image search enrichment"
    )
    content_map_parser.set_defaults(func=cmd_content_map)

    # Build and generate share template selection
    for name, help_text, func in (
        ("build", "Build a deck from a content map JSON file", cmd_build),
        ("generate", "Full workflow from subject to PPTX", cmd_generate),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        if name == "build":
            sub.add_argument("content_map", help="Path to content map JSON file")
        else:
            sub.add_argument("subject", help="What the presentation is about")
            sub.add_argument(
                "--no-images",
                action="store_true",
                help="Skip image search enrichment"
            )
        template_group = sub.add_mutually_exclusive_group()
        template_group.add_argument("--template", help="Path to a template JSON file")
        template_group.add_argument("--template-id", help="Template id from the catalog")
        sub.add_argument(
            "--output-dir", "-o",
            default=str(config.OUTPUT_DIR),
            help="Directory for the generated deck"
        )
        sub.set_defaults(func=func)

    # Colors command
    colors_parser = subparsers.add_parser(
        "colors",
        help="Estimate the background gradient of an image"
    )
    colors_parser.add_argument("image", help="Path to an image file")
    colors_parser.set_defaults(func=cmd_colors)

    # Config command
    config_parser = subparsers.add_parser(
        "config",
        help="Show configuration status"
    )
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)
    config.load_env_file()

    try:
        args.func(args)
    except SlidemapError as e:
        if args.debug:
            raise
        sys.exit(f"Error: {e}")


if __name__ == "__main__":
    main()
