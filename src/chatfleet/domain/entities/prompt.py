"""Prompt configuration entity."""

import re
from dataclasses import dataclass, field
from enum import Enum

MAX_IMAGES = 7
MAX_VIDEOS = 4

_TAG_PATTERN = re.compile(r"^\[(imagen|video)(\d)\]$")


class MediaType(Enum):
    """Kinds of media assets a reply can carry."""

    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class MediaAsset:
    """A concrete media asset.

    Attributes:
        type: Image or video.
        url: Asset URL.
    """

    type: MediaType
    url: str


@dataclass(frozen=True)
class PromptConfig:
    """Per-channel prompt configuration.

    Attributes:
        prompt_id: Prompt identifier scoping history rows.
        channel: Channel number the prompt belongs to.
        tenant_id: Owning tenant.
        system_prompt: System prompt text.
        image_urls: Up to 7 image URLs; index 0 is ``[imagen1]``.
        video_urls: Up to 4 video URLs; index 0 is ``[video1]``.
    """

    prompt_id: str
    channel: str
    tenant_id: str
    system_prompt: str
    image_urls: tuple[str | None, ...] = field(default_factory=tuple)
    video_urls: tuple[str | None, ...] = field(default_factory=tuple)

    def asset_for_tag(self, tag: str) -> MediaAsset | None:
        """Look up the asset mapped to a symbolic media tag.

        Args:
            tag: Tag such as "[imagen2]" or "[video1]".

        Returns:
            The asset, or None when the tag is unknown or has no URL.
        """
        match = _TAG_PATTERN.match(tag)
        if match is None:
            return None

        kind, number = match.group(1), int(match.group(2))
        if kind == "imagen":
            urls, media_type, limit = self.image_urls, MediaType.IMAGE, MAX_IMAGES
        else:
            urls, media_type, limit = self.video_urls, MediaType.VIDEO, MAX_VIDEOS

        if number < 1 or number > limit or number > len(urls):
            return None
        url = urls[number - 1]
        if not url:
            return None
        return MediaAsset(type=media_type, url=url)
