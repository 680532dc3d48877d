"""Symbolic media tag resolution."""

import re
from dataclasses import dataclass

from chatfleet.domain.entities import MediaAsset, PromptConfig

MEDIA_TAG_PATTERN = re.compile(r"\[(?:imagen[1-7]|video[1-4])\]")


@dataclass(frozen=True)
class MediaDispatch:
    """A media message ready to be sent.

    Attributes:
        tag: Tag found in the reply.
        asset: Asset mapped to the tag.
        caption: Reply text with the tag removed.
    """

    tag: str
    asset: MediaAsset
    caption: str


def extract_media_tags(text: str) -> list[str]:
    """Find media tags in left-to-right order, without duplicates.

    Args:
        text: Reply text.

    Returns:
        Tags such as ["[imagen2]", "[video1]"].
    """
    tags: list[str] = []
    for match in MEDIA_TAG_PATTERN.finditer(text):
        tag = match.group(0)
        if tag not in tags:
            tags.append(tag)
    return tags


def first_media_tag(text: str) -> str | None:
    match = MEDIA_TAG_PATTERN.search(text)
    return match.group(0) if match else None


def resolve_media(reply: str, prompt: PromptConfig) -> list[MediaDispatch]:
    """Map the tags of a reply to configured assets.

    Tags without a configured URL are skipped. The caller sends the first
    entry and falls back to the next one only if sending fails.

    Args:
        reply: Post-processed reply text.
        prompt: Channel prompt configuration holding the asset URLs.

    Returns:
        Resolvable dispatches in tag order (empty when nothing resolves).
    """
    dispatches: list[MediaDispatch] = []
    for tag in extract_media_tags(reply):
        asset = prompt.asset_for_tag(tag)
        if asset is None:
            continue
        caption = reply.replace(tag, "", 1).strip()
        dispatches.append(MediaDispatch(tag=tag, asset=asset, caption=caption))
    return dispatches
