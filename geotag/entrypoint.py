"""CLIエントリーポイント"""
import argparse
import json
import sys
from typing import Any, Optional

from .features.geocoding.services.location_description_service import (
    LocationDescriptionService,
)
from .features.privacy.domain.tag_grammar import extract_tags, is_valid_tag
from .features.privacy.services.location_privacy_service import LocationPrivacyService
from .infrastructure.config.settings import Settings
from .shared.exceptions.errors import GeoTagError
from .shared.logging.config import get_logger, setup_logging

logger = get_logger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def build_parser() -> argparse.ArgumentParser:
    """引数パーサーを作成"""
    parser = argparse.ArgumentParser(
        prog="geotag",
        description="座標を約1km四方のプライバシー保護ジオタグに変換するツール",
    )

    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="環境変数ファイルのパス（デフォルト: .env）",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="ログレベル",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    truncate_parser = subparsers.add_parser("truncate", help="座標をジオタグに変換")
    truncate_parser.add_argument("lat", type=float, help="緯度")
    truncate_parser.add_argument("lng", type=float, help="経度")
    truncate_parser.add_argument("--label", type=str, help="任意のラベル")

    area_parser = subparsers.add_parser("area", help="ジオタグの領域を表示")
    area_parser.add_argument("tag", type=str)

    validate_parser = subparsers.add_parser("validate", help="ジオタグの書式を検証")
    validate_parser.add_argument("tag", type=str)

    extract_parser = subparsers.add_parser("extract", help="テキストからジオタグを抽出")
    extract_parser.add_argument(
        "text", type=str, nargs="?", help="対象テキスト（省略時は標準入力）"
    )

    nearby_parser = subparsers.add_parser("nearby", help="近隣エリアのジオタグを表示")
    nearby_parser.add_argument("tag", type=str)
    nearby_parser.add_argument(
        "--radius", type=float, default=1.0, help="オフセットの倍率（デフォルト: 1）"
    )

    contains_parser = subparsers.add_parser("contains", help="座標がジオタグ内か判定")
    contains_parser.add_argument("lat", type=float)
    contains_parser.add_argument("lng", type=float)
    contains_parser.add_argument("tag", type=str)

    describe_parser = subparsers.add_parser(
        "describe", help="ジオタグの地域名を逆ジオコーディングで取得"
    )
    describe_parser.add_argument("tag", type=str)

    return parser


def run_command(
    args: argparse.Namespace,
    settings: Settings,
    service: Optional[LocationPrivacyService] = None,
) -> int:
    """
    サブコマンドを実行

    Returns:
        int: 終了コード（0: 成功, 1: 失敗・不正なタグ）
    """
    service = service or LocationPrivacyService()

    if args.command == "truncate":
        location = service.truncate(args.lat, args.lng, args.label)
        _print_json(
            {**location.to_dict(), "display": service.format_for_display(location)}
        )
        return 0

    if args.command == "area":
        area = service.reconstruct(args.tag)
        if area is None:
            logger.error(f"Invalid or undecodable geo tag: {args.tag}")
            return 1
        _print_json(area.to_dict())
        return 0

    if args.command == "validate":
        valid = is_valid_tag(args.tag)
        _print_json({"tag": args.tag, "valid": valid})
        return 0 if valid else 1

    if args.command == "extract":
        text = args.text if args.text is not None else sys.stdin.read()
        _print_json(extract_tags(text))
        return 0

    if args.command == "nearby":
        tags = service.nearby_tags(args.tag, args.radius)
        if not tags:
            logger.error(f"Invalid or undecodable geo tag: {args.tag}")
            return 1
        _print_json(tags)
        return 0

    if args.command == "contains":
        _print_json({"contains": service.contains(args.lat, args.lng, args.tag)})
        return 0

    if args.command == "describe":
        if not settings.reverse_geocoding_enabled:
            logger.error("Reverse geocoding is disabled")
            return 1
        description_service = LocationDescriptionService.from_settings(settings)
        description = description_service.describe(args.tag)
        if description is None:
            _print_json({"tag": args.tag, "description": None})
            return 1
        _print_json({"tag": args.tag.lower(), "description": description.to_dict()})
        return 0

    logger.error(f"Unknown command: {args.command}")
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード（0: 成功, 1: 失敗）
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings(_env_file=args.env_file)

        if args.log_level:
            settings.log_level = args.log_level

        setup_logging(level=settings.log_level)

        logger.debug(f"Environment: {settings.environment}")
        logger.debug(f"Command: {args.command}")

        return run_command(args, settings)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130  # SIGINT
    except GeoTagError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        return 1
    except Exception as e:
        logger.error(f"Application failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
