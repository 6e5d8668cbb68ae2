"""
Page result assembly for V2EX member and topic pages.
Locates fields with CSS selectors and turns them into typed result records.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from .exceptions import UnsupportedPageKind
from .models import (
    Author,
    LabelNumber,
    PostResult,
    PostStatistics,
    ProfileResult,
    RecentReply,
    Reply,
    ReplyImage,
    SocialLink,
)
from .normalizer import normalize_fragment
from .recognizer import extract_wallet_info, find_addresses, find_domains

PROFILE_PAGE = 'user_info'
POST_PAGE = 'post'

_MEMBER_NUMBER_RE = re.compile(r'V2EX 第 (\d+) 号会员')
_JOIN_TIME_RE = re.compile(r'加入于 ([\d\-\s:]+)')
_ACTIVE_RANK_RE = re.compile(r'今日活跃度排名 (\d+)')
_CLICK_COUNT_RE = re.compile(r'(\d+) 次点击')
_FLOOR_RE = re.compile(r'^\s*(\d+)')
_DEVICE_RE = re.compile(r'via (.+)$')

_MEMBER_PATH_RE = re.compile(r'/member/([^/?#]+)')
_TOPIC_PATH_RE = re.compile(r'/t/(\d+)')

_WORDS_PATTERNS = (
    re.compile(r'var\s+words\s*=\s*(\[[^\]]*\]);'),
    re.compile(r'words\s*=\s*(\[[^\]]*\]);'),
)
_WORDS_STRIP_RE = re.compile(r'[\'"\[\]]')


def _substitute_entities(text: str) -> str:
    return EntitySubstitution.substitute_xml(text).replace('\xa0', '&nbsp;')


# Serializes fragments with non-breaking spaces written back as &nbsp;
_FRAGMENT_FORMATTER = HTMLFormatter(entity_substitution=_substitute_entities)


def classify_page(url: str) -> str:
    """
    Decide which result shape a URL produces.

    Raises:
        UnsupportedPageKind: If the URL is neither a member page nor a topic page
    """
    if '/member/' in url:
        return PROFILE_PAGE
    if '/t/' in url:
        return POST_PAGE
    raise UnsupportedPageKind(url)


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def _inner_html(element: Tag) -> str:
    return element.decode_contents(formatter=_FRAGMENT_FORMATTER)


def _element_text(element: Optional[Tag]) -> str:
    """Normalized text of an element's inner HTML ("" when missing)."""
    if element is None:
        return ''
    return normalize_fragment(_inner_html(element))


def _label_number(pattern: re.Pattern, text: str) -> LabelNumber:
    match = pattern.search(text or '')
    return int(match.group(1)) if match else ''


def _member_id(href: Optional[str]) -> str:
    if not href:
        return ''
    match = _MEMBER_PATH_RE.search(href)
    return match.group(1) if match else href.replace('/member/', '')


def _timestamp(element: Optional[Tag]) -> str:
    """Prefer the absolute time in the title attribute over the relative text."""
    if element is None:
        return ''
    return element.get('title') or element.get_text().strip()


def _host(href: str) -> str:
    netloc = urlparse(href).netloc.lower()
    return netloc[4:] if netloc.startswith('www.') else netloc


class PageExtractor:
    """
    Builds ProfileResult and PostResult records from parsed V2EX documents.
    All text goes through the fragment normalizer; free text additionally
    goes through the address/domain recognizer.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract_profile(self, soup: BeautifulSoup, url: str, base_url: str) -> ProfileResult:
        """
        Assemble a member profile.

        Args:
            soup: Parsed member page
            url: URL the page was fetched from
            base_url: Site root used to build topic URLs of recent replies

        Returns:
            ProfileResult
        """
        match = _MEMBER_PATH_RE.search(url)
        user_id = match.group(1) if match else ''

        avatar = soup.select_one('.avatar')
        member_info = _element_text(soup.select_one('.gray'))
        join_time = _JOIN_TIME_RE.search(member_info)

        script_text = '\n'.join(script.get_text() for script in soup.find_all('script'))
        solana_address, solana_domain = extract_wallet_info(script_text, soup.get_text('\n'))

        profile = ProfileResult(
            url=url,
            username=_element_text(soup.select_one('h1')),
            user_id=user_id,
            member_id=_label_number(_MEMBER_NUMBER_RE, member_info),
            avatar=(avatar.get('src') or '') if avatar is not None else '',
            signature=_element_text(soup.select_one('.bigger')),
            join_time=join_time.group(1).strip() if join_time else '',
            active_rank=_label_number(_ACTIVE_RANK_RE, member_info),
            is_pro=soup.select_one('.badge.pro') is not None,
            social_links=self.extract_social_links(soup),
            solana_address=solana_address,
            solana_domain=solana_domain,
            recent_replies=self.extract_recent_replies(soup, base_url),
        )
        self.logger.debug(f"Assembled profile {user_id}: {len(profile.recent_replies)} recent replies")
        return profile

    def extract_social_links(self, soup: BeautifulSoup) -> dict:
        """Classify the member's social labels by the host they point at."""
        links = {}
        for element in soup.select('.social_label'):
            href = element.get('href') or ''
            label = _element_text(element)
            host = _host(href)

            if host in ('twitter.com', 'x.com'):
                links['twitter'] = SocialLink(url=href, label=label)
            elif host == 'github.com':
                links['github'] = SocialLink(url=href, label=label)
            elif host in ('telegram.me', 't.me'):
                links['telegram'] = SocialLink(url=href, label=label)
            elif host == 'google.com' and urlparse(href).path.startswith('/maps'):
                links['location'] = SocialLink(url=href, label=label)
            elif href:
                links['website'] = SocialLink(url=href, label=label)
        return links

    def extract_recent_replies(self, soup: BeautifulSoup, base_url: str) -> List[RecentReply]:
        """Replies listed on a profile: a .dock_area header followed by an .inner body."""
        replies = []
        for dock in soup.select('.dock_area'):
            sibling = dock.find_next_sibling()
            content_element = None
            if sibling is not None and 'inner' in (sibling.get('class') or []):
                content_element = sibling.select_one('.reply_content')
            content = _element_text(content_element)
            if not content:
                continue

            topic_link = dock.select_one('a[href*="/t/"]')
            topic_match = _TOPIC_PATH_RE.search(topic_link.get('href') or '') if topic_link is not None else None
            topic_id = topic_match.group(1) if topic_match else ''

            replies.append(RecentReply(
                time=_timestamp(dock.select_one('.fade')),
                content=content,
                topic_id=topic_id,
                topic_url=f"{base_url}/t/{topic_id}" if topic_id else '',
                solana_addresses=find_addresses(content),
                solana_domains=find_domains(content),
            ))
        return replies

    def extract_post(self, soup: BeautifulSoup, url: str) -> PostResult:
        """
        Assemble a topic page (first page or a single page fetch).

        Args:
            soup: Parsed topic page
            url: URL the page was fetched from

        Returns:
            PostResult with statistics derived from this page's replies
        """
        match = _TOPIC_PATH_RE.search(url)
        post_id = match.group(1) if match else ''

        author_element = soup.select_one('.header small.gray a[href*="/member/"]')
        author_avatar = soup.select_one('.header img.avatar')
        header_text = ' '.join(element.get_text() for element in soup.select('.header .gray'))
        content = _element_text(soup.select_one('.topic_content'))
        tags = [tag for tag in (_element_text(element) for element in soup.select('.tag')) if tag]
        replies = self.extract_replies(soup)

        post = PostResult(
            url=url,
            post_id=post_id,
            title=_element_text(soup.select_one('h1')),
            author=Author(
                name=_element_text(author_element),
                id=_member_id(author_element.get('href') if author_element is not None else None),
                avatar=(author_avatar.get('src') or '') if author_avatar is not None else '',
            ),
            post_time=_timestamp(soup.select_one('.header .gray .ago, .header .gray span[title]')),
            click_count=_label_number(_CLICK_COUNT_RE, header_text),
            content=content,
            tags=tags,
            reply_user_ids=self.extract_reply_user_ids(soup),
            replies=replies,
            statistics=PostStatistics.from_replies(replies),
            solana_addresses=find_addresses(content),
            solana_domains=find_domains(content),
        )
        self.logger.debug(f"Assembled topic {post_id}: {len(replies)} replies")
        return post

    def extract_replies(self, soup: BeautifulSoup) -> List[Reply]:
        """Reply rows of one topic page; rows with neither text nor images are dropped."""
        replies = []
        for cell in soup.select('.cell[id^="r_"]'):
            reply = self._extract_reply(cell)
            if reply.has_content():
                replies.append(reply)
        return replies

    def _extract_reply(self, cell: Tag) -> Reply:
        author_element = cell.select_one('strong a.dark')
        avatar = cell.select_one('img.avatar')
        content_element = cell.select_one('.reply_content')
        ago = cell.select_one('.ago')

        content_html = ''
        images = []
        if content_element is not None:
            content_html = _inner_html(content_element)
            for img in content_element.select('img'):
                src = img.get('src')
                if src:
                    images.append(ReplyImage(src=src, alt=img.get('alt') or ''))
        content = normalize_fragment(content_html)

        device_match = _DEVICE_RE.search(ago.get_text().strip()) if ago is not None else None
        floor = cell.select_one('.no')

        return Reply(
            id=(cell.get('id') or '').replace('r_', '', 1),
            floor=_label_number(_FLOOR_RE, floor.get_text() if floor is not None else ''),
            author=Author(
                name=_element_text(author_element),
                id=_member_id(author_element.get('href') if author_element is not None else None),
                avatar=(avatar.get('src') or '') if avatar is not None else '',
            ),
            content=content,
            content_html=content_html,
            images=images,
            time=_timestamp(ago),
            device=device_match.group(1) if device_match else '',
            solana_addresses=find_addresses(content),
            solana_domains=find_domains(content),
        )

    def extract_reply_user_ids(self, soup: BeautifulSoup) -> List[str]:
        """
        Ids of members who replied, as the page exposes them.

        The inline `var words = [...]` script is authoritative; when it is
        missing the distinct reply authors found in the HTML are used.
        """
        script_text = '\n'.join(script.get_text() for script in soup.find_all('script'))
        for pattern in _WORDS_PATTERNS:
            match = pattern.search(script_text)
            if match:
                cleaned = _WORDS_STRIP_RE.sub('', match.group(1))
                user_ids = [user_id.strip() for user_id in cleaned.split(',') if user_id.strip()]
                self.logger.debug(f"Extracted {len(user_ids)} reply user ids from page script")
                return user_ids

        user_ids = []
        for link in soup.select('.cell[id^="r_"] strong a.dark'):
            user_id = _member_id(link.get('href'))
            if user_id and user_id not in user_ids:
                user_ids.append(user_id)

        if user_ids:
            self.logger.debug(f"Extracted {len(user_ids)} reply user ids from reply rows")
        else:
            self.logger.debug("No reply user ids found in scripts or reply rows")
        return user_ids
