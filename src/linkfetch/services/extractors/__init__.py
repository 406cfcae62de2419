"""Extraction strategies for turning links into direct media URLs."""

from linkfetch.services.extractors.base import Extractor
from linkfetch.services.extractors.html_images import HtmlImageExtractor
from linkfetch.services.extractors.vxtwitter import VxTwitterExtractor
from linkfetch.services.extractors.ytdlp import YtDlpExtractor, YtDlpOptions

__all__ = [
    "Extractor",
    "HtmlImageExtractor",
    "VxTwitterExtractor",
    "YtDlpExtractor",
    "YtDlpOptions",
]
