"""ジオタグの字句定義と抽出ユーティリティ"""

import re
from typing import Any, Iterable

GEO_TAG_PREFIX = "#geo"
PRIVACY_CODE_LENGTH = 6  # 約1km四方
CODE_ALPHABET = "23456789CFGHJMPQRVWX"  # Open Location Codeの20文字

_BODY_PATTERN = re.compile(rf"[{CODE_ALPHABET}]{{{PRIVACY_CODE_LENGTH}}}", re.IGNORECASE)

# 直前に"#"がなく、直後にPlus Codeの文字が続かないものだけを抽出
_EXTRACT_PATTERN = re.compile(
    rf"(?<!#){re.escape(GEO_TAG_PREFIX)}[{CODE_ALPHABET}]{{{PRIVACY_CODE_LENGTH}}}(?![{CODE_ALPHABET}])",
    re.IGNORECASE,
)


def is_valid_tag(value: Any) -> bool:
    """
    ジオタグとして正しい書式か判定

    大文字・小文字は区別しない。プレフィックスの後ろは
    Plus Codeの文字ちょうど6文字のみ許可する（空白・記号・改行は不可）。

    Args:
        value: 判定対象

    Returns:
        bool: 正しいジオタグならTrue
    """
    if not isinstance(value, str):
        return False

    if not value.lower().startswith(GEO_TAG_PREFIX):
        return False

    body = value[len(GEO_TAG_PREFIX) :]
    return _BODY_PATTERN.fullmatch(body) is not None


def normalize_tag(tag: str) -> str:
    """ジオタグを正規形（小文字）に変換"""
    return tag.lower()


def tag_body(tag: str) -> str:
    """ジオタグからPlus Code部分（大文字）を取り出す"""
    return tag[len(GEO_TAG_PREFIX) :].upper()


def extract_tags(text: str) -> list[str]:
    """
    テキストからジオタグをすべて抽出

    出現順に返し、重複は除去しない。結果は小文字に正規化する。
    "##geo..." や7文字以上のコードにはマッチしない。

    Args:
        text: 投稿本文などの任意のテキスト

    Returns:
        list[str]: 抽出したジオタグ
    """
    if not text:
        return []

    return [match.group(0).lower() for match in _EXTRACT_PATTERN.finditer(text)]


def filter_geo_tags(hashtags: Iterable[str]) -> list[str]:
    """
    ハッシュタグのリストからジオタグのみを取り出す

    Args:
        hashtags: ハッシュタグのリスト（"#pothole"など他のタグを含んでよい）

    Returns:
        list[str]: ジオタグ（小文字、元の順序）
    """
    return [normalize_tag(tag) for tag in hashtags if is_valid_tag(tag)]


def parse_location_input(value: str) -> list[str]:
    """
    位置入力欄の文字列から複数のジオタグを取り出す

    空白で区切り、正しいジオタグだけを順序を保って重複なく返す。
    """
    if not value:
        return []

    tags: list[str] = []
    for token in value.split():
        if is_valid_tag(token):
            tag = normalize_tag(token)
            if tag not in tags:
                tags.append(tag)
    return tags
