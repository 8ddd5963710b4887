"""
HTML parser for extracting anchor targets.
"""

import logging
from typing import List

from bs4 import BeautifulSoup


class LinkParser:
    """
    Extracts raw anchor href values from HTML.

    Values are returned exactly as written in the markup: relative forms,
    fragments and duplicates are all kept. Resolution happens later.
    """

    def __init__(self, features: str = 'lxml'):
        self.features = features
        self.logger = logging.getLogger(__name__)

    def extract_anchors(self, html_content: str) -> List[str]:
        """
        Return the href attribute of every <a> element in document order.

        Args:
            html_content: Raw HTML content

        Returns:
            List of raw href strings
        """
        if not html_content:
            return []

        soup = BeautifulSoup(html_content, self.features)
        links = [anchor['href'] for anchor in soup.find_all('a', href=True)]

        self.logger.debug(f"Found {len(links)} anchors")
        return links
