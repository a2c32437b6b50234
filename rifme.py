"""rifme: Russian rhyme lookup backed by the rifme.net web service.

The tool requests the rhyme page for a word, passing the syllable and
part-of-speech filters as cookies the site understands, and extracts the
suggested words from the returned HTML. When no syllable count is given the
lookup fans out across syllable counts 1 through 8 and merges the results.

The script can be executed directly and prints one rhyme per line, or a JSON
array with ``--format json``.
"""
from __future__ import annotations

import argparse
import enum
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger("rifme")

BASE_URL = "https://rifme.net"

# Desktop Firefox identification sent with every request.
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:78.0) Gecko/20100101 Firefox/78.0"

RHYME_SELECTOR = 'li[class="riLi"]'
RHYME_ATTRIBUTE = "data-w"

SYLLABLES_COOKIE = "slogovcookie"
PART_COOKIE = "chastcookie"

FULL_SYLLABLE_RANGE = range(1, 9)

# (connect, read) seconds.
DEFAULT_TIMEOUT: Tuple[float, float] = (5, 10)


class RifmeError(Exception):
    """Base class for rhyme lookup failures."""


class NetworkError(RifmeError):
    """The rhyme page could not be retrieved."""


class ParseError(RifmeError):
    """The rhyme page did not have the expected structure."""


class FanOutError(RifmeError):
    """A sub-request of a full syllable lookup failed."""

    def __init__(self, syllables: int, cause: Exception):
        super().__init__(f"lookup for {syllables} syllable(s) failed: {cause}")
        self.syllables = syllables
        self.cause = cause


class PartOfSpeech(enum.IntEnum):
    """Part-of-speech filter, valued by the code the site expects."""

    OTHER = 0
    NOUN = 1
    ADJ = 2
    VERB = 3

    @classmethod
    def from_name(cls, name: str) -> "PartOfSpeech":
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"unknown part of speech: {name!r}") from None


@dataclass(frozen=True)
class RequestOptions:
    """Filters applied to a single rhyme page request."""

    syllables: Optional[int] = None
    part: Optional[PartOfSpeech] = None
    emphasis: Optional[int] = None


def build_cookie(options: RequestOptions) -> str:
    """Encode the cookie-backed filters of ``options``.

    Present fields become ``key=value;`` pairs, syllables first; absent fields
    are left out entirely.
    """
    cookie = ""
    if options.syllables is not None:
        cookie += f"{SYLLABLES_COOKIE}={options.syllables};"
    if options.part is not None:
        cookie += f"{PART_COOKIE}={int(options.part)};"
    return cookie


def build_url(word: str, emphasis: Optional[int] = None, base_url: str = BASE_URL) -> str:
    """Return the rhyme page URL for ``word``, optionally pinned to an emphasis."""
    url = f"{base_url.rstrip('/')}/r/{quote(word, safe='')}"
    if emphasis is not None:
        url += f"/{emphasis}"
    return url


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def extract_rhymes(soup: BeautifulSoup) -> List[str]:
    """Return the rhyme words listed in ``soup`` in document order.

    Raises ``ParseError`` if any rhyme item lacks its word attribute; a
    malformed item invalidates the whole page.
    """
    rhymes: List[str] = []
    for item in soup.select(RHYME_SELECTOR):
        word = item.get(RHYME_ATTRIBUTE)
        if word is None:
            raise ParseError(f"rhyme item without {RHYME_ATTRIBUTE!r} attribute: {item}")
        rhymes.append(word)
    return rhymes


class RifmeScraper:
    """Fetch and extract rhymes from the rifme.net service."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        user_agent: str = USER_AGENT,
        timeout: Union[float, Tuple[float, float]] = DEFAULT_TIMEOUT,
    ):
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        self.base_url = base_url
        self.user_agent = user_agent
        self.timeout = timeout

    def fetch_page(self, url: str, options: RequestOptions) -> str:
        """GET ``url`` with the cookie encoding of ``options`` and return the body."""
        cookie = build_cookie(options)
        logger.debug("Fetching %s (cookie: %r)", url, cookie)
        try:
            response = self.session.get(url, headers={"Cookie": cookie}, timeout=self.timeout)
            response.raise_for_status()
            return response.text
        except requests.RequestException as exc:
            raise NetworkError(f"failed to fetch {url}: {exc}") from exc

    def get_rhymes(self, word: str, options: RequestOptions) -> List[str]:
        """Run a single lookup for ``word`` with ``options``."""
        url = build_url(word, options.emphasis, base_url=self.base_url)
        body = self.fetch_page(url, options)
        rhymes = extract_rhymes(parse_document(body))
        logger.debug("Extracted %d rhyme(s) from %s (syllables=%s)", len(rhymes), url, options.syllables)
        return rhymes

    def find_rhymes(
        self,
        word: str,
        syllables: Optional[int] = None,
        part: Optional[PartOfSpeech] = None,
        emphasis: Optional[int] = None,
    ) -> List[str]:
        """Look up rhymes for ``word``.

        Parameters
        ----------
        word:
            The word to rhyme.
        syllables:
            A positive count restricts the lookup to one request. ``None`` or
            a value <= 0 queries every count in ``FULL_SYLLABLE_RANGE``
            concurrently and concatenates the results in ascending count
            order.
        part, emphasis:
            Filters passed through to every request.

        Any failing request aborts the whole lookup; in the concurrent case
        the first failure in count order is raised as ``FanOutError``.
        """
        if syllables is not None and syllables > 0:
            return self.get_rhymes(word, RequestOptions(syllables, part, emphasis))

        base = RequestOptions(part=part, emphasis=emphasis)
        counts = list(FULL_SYLLABLE_RANGE)
        logger.debug("Querying syllable counts %d-%d for %r", counts[0], counts[-1], word)
        with ThreadPoolExecutor(max_workers=len(counts)) as executor:
            futures = [
                executor.submit(self.get_rhymes, word, replace(base, syllables=count))
                for count in counts
            ]

        rhymes: List[str] = []
        for count, future in zip(counts, futures):
            try:
                rhymes.extend(future.result())
            except RifmeError as exc:
                raise FanOutError(count, exc) from exc
        return rhymes


def output_data(rhymes: Sequence[str], format_type: str, output_file: Optional[str] = None) -> str:
    """Serialize ``rhymes`` as text or JSON and optionally persist it to ``output_file``.

    Returns the serialized string for convenience.
    """
    format_type = format_type.lower()

    if format_type == "text":
        serialized = "\n".join(rhymes)
    elif format_type == "json":
        serialized = json.dumps(list(rhymes), ensure_ascii=False, indent=2)
    else:
        raise ValueError("format_type must be either 'text' or 'json'")

    if output_file:
        with open(output_file, "w", encoding="utf-8") as handle:
            handle.write(serialized)
    return serialized


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="rifme - generate Russian rhymes with the rifme.net service",
    )
    parser.add_argument("word", help="Word to get rhymes for.")
    parser.add_argument(
        "-s",
        "--syllables",
        type=int,
        default=None,
        help="Number of syllables; any by default, 0 queries every count (may be slow).",
    )
    parser.add_argument(
        "-p",
        "--part",
        choices=["noun", "adj", "verb", "other"],
        default=None,
        help="Part of speech; all by default.",
    )
    parser.add_argument(
        "-e",
        "--emphasis",
        type=int,
        default=None,
        help="Stressed syllable counted from the end: 0 for last, 1 for second to last, etc.",
    )
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output serialization format.",
    )
    parser.add_argument(
        "--output",
        help="Optional path to save serialized output.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Read timeout in seconds for each request.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for command-line execution."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    timeout = DEFAULT_TIMEOUT if args.timeout is None else (DEFAULT_TIMEOUT[0], args.timeout)
    scraper = RifmeScraper(timeout=timeout)
    part = PartOfSpeech.from_name(args.part) if args.part else None

    try:
        rhymes = scraper.find_rhymes(args.word, syllables=args.syllables, part=part, emphasis=args.emphasis)
    except RifmeError as exc:
        if args.verbose:
            logger.exception("Rhyme lookup for %r failed", args.word)
        else:
            logger.error("Rhyme lookup for %r failed: %s", args.word, exc)
        return 1

    serialized = output_data(rhymes, args.format, output_file=args.output)
    print(serialized)

    return 0


if __name__ == "__main__":
    sys.exit(main())
