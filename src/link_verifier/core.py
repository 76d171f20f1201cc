"""
Core link verification logic and data structures.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple, Union
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup, SoupStrainer

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_USER_AGENT = "LinkCrawler/1.0"
DEFAULT_LOCAL_HOSTS: Tuple[str, ...] = ("localhost", "127.0.0.1")

# Social/messaging platforms linked from the storefront footer
DEFAULT_EXTERNAL_DOMAINS: Tuple[str, ...] = (
    "facebook.com",
    "instagram.com",
    "twitter.com",
    "linkedin.com",
    "youtube.com",
    "tiktok.com",
    "wa.me",
    "whatsapp.com",
    "t.me",
    "telegram.org",
)

SKIP_SCHEMES: frozenset[str] = frozenset(("mailto", "tel", "javascript"))
HTTP_SCHEMES: frozenset[str] = frozenset(("http", "https"))

NOT_FOUND_PAGE_MARKERS: Tuple[str, ...] = (
    "page not found",
    "this page does not exist",
    "couldn't find",
)
RESOURCE_MARKERS: Tuple[str, ...] = ("collection", "product")

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)

# Returns a reason string when the body looks broken, else None
ContentCheck = Callable[[str], Optional[str]]


@dataclass(frozen=True, slots=True)
class VerifierConfig:
    """Run configuration, passed explicitly to every stage."""
    base_url: str = DEFAULT_BASE_URL
    local_hosts: Tuple[str, ...] = DEFAULT_LOCAL_HOSTS
    external_domains: Tuple[str, ...] = DEFAULT_EXTERNAL_DOMAINS
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: Optional[float] = None

    @property
    def root_urls(self) -> frozenset[str]:
        base = self.base_url.rstrip("/")
        return frozenset(("/", base, base + "/"))


class LinkKind(Enum):
    LOCAL = "local"
    SKIPPED_SCHEME = "skipped_scheme"
    DENYLISTED = "denylisted"
    OTHER_EXTERNAL = "other_external"
    UNPARSABLE = "unparsable"


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a single GET; status 0 with error set means transport failure."""
    status: int
    body: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ClassifiedLink:
    original: str
    kind: LinkKind
    normalized: str

    @property
    def is_external(self) -> bool:
        return self.kind is not LinkKind.LOCAL


@dataclass(frozen=True, slots=True)
class Good:
    link: str
    status: int


@dataclass(frozen=True, slots=True)
class Broken:
    link: str
    status: int
    reason: Optional[str] = None


@dataclass(frozen=True, slots=True)
class TransportError:
    link: str
    error: str


Outcome = Union[Good, Broken, TransportError]


@dataclass(slots=True)
class RunReport:
    """Aggregated verification results for summary output."""
    total_links: int = 0
    external_links: List[ClassifiedLink] = field(default_factory=list)
    good: List[Good] = field(default_factory=list)
    broken: List[Broken] = field(default_factory=list)
    errors: List[TransportError] = field(default_factory=list)

    @property
    def checked(self) -> int:
        return len(self.good) + len(self.broken) + len(self.errors)

    @property
    def denylisted(self) -> int:
        return sum(1 for c in self.external_links if c.kind is LinkKind.DENYLISTED)

    @property
    def exit_code(self) -> int:
        return 1 if self.broken or self.errors else 0

    def record(self, outcome: Outcome) -> None:
        if isinstance(outcome, Good):
            self.good.append(outcome)
        elif isinstance(outcome, Broken):
            self.broken.append(outcome)
        else:
            self.errors.append(outcome)


def make_session(config: VerifierConfig) -> requests.Session:
    """Create the HTTP session shared by every fetch of a run."""
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    return session


def fetch_page(session: requests.Session, url: str, config: VerifierConfig) -> FetchResult:
    """
    GET a URL, following redirects.

    Transport failures (DNS, refused connection, timeout, bad URL) are returned
    as a FetchResult with status 0 and the error message; this never raises.
    """
    try:
        resp = session.get(url, timeout=config.timeout_s, allow_redirects=True)
    except requests.RequestException as e:
        return FetchResult(status=0, body="", ok=False, error=str(e) or type(e).__name__)

    # requests falls back to ISO-8859-1 for text/* without a charset
    if "charset" not in (resp.headers.get("content-type") or "").lower():
        resp.encoding = "utf-8"

    return FetchResult(
        status=resp.status_code,
        body=resp.text,
        ok=200 <= resp.status_code <= 299,
    )


def extract_links(html: str) -> List[str]:
    """
    Extract unique href values from <a> tags, in first-seen order.

    Values are returned as the parser reports them, so HTML entities are
    decoded (`&amp;` becomes `&`); that is the URL a browser would request.
    """
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)
    hrefs = (a.get("href") for a in soup.find_all("a"))
    return list(dict.fromkeys(h for h in hrefs if isinstance(h, str) and h))


def _is_denylisted(hostname: str, domains: Iterable[str]) -> bool:
    return any(hostname == d or hostname.endswith("." + d) for d in domains)


def classify_link(href: str, config: VerifierConfig) -> ClassifiedLink:
    """
    Decide whether an href is crawlable and normalize it.

    - mailto:, tel:, javascript: and fragment-only hrefs are skipped
    - absolute URLs on a local host become path + query
    - absolute URLs on any other host are external; the denylist only labels them
    - anything that fails to parse is external
    - bare paths are internal and kept as-is
    """
    if href.startswith("#"):
        return ClassifiedLink(href, LinkKind.SKIPPED_SCHEME, href)

    try:
        parsed = urlparse(href)
        hostname = (parsed.hostname or "").lower()
        # Accessing port raises ValueError when it is malformed
        _ = parsed.port
    except ValueError:
        return ClassifiedLink(href, LinkKind.UNPARSABLE, href)

    if parsed.scheme in SKIP_SCHEMES:
        return ClassifiedLink(href, LinkKind.SKIPPED_SCHEME, href)

    if parsed.netloc:
        if parsed.scheme and parsed.scheme not in HTTP_SCHEMES:
            return ClassifiedLink(href, LinkKind.SKIPPED_SCHEME, href)
        if hostname in config.local_hosts:
            # Collapse leading slashes so the result never reads as a netloc
            normalized = "/" + parsed.path.lstrip("/")
            if parsed.query:
                normalized += "?" + parsed.query
            return ClassifiedLink(href, LinkKind.LOCAL, normalized)
        if _is_denylisted(hostname, config.external_domains):
            return ClassifiedLink(href, LinkKind.DENYLISTED, href)
        return ClassifiedLink(href, LinkKind.OTHER_EXTERNAL, href)

    if parsed.scheme:
        return ClassifiedLink(href, LinkKind.SKIPPED_SCHEME, href)

    return ClassifiedLink(href, LinkKind.LOCAL, href)


def normalize_link(href: str, config: VerifierConfig) -> str:
    """Normalized form of an href; idempotent for internal links."""
    return classify_link(href, config).normalized


def partition_links(
    hrefs: Iterable[str], config: VerifierConfig
) -> Tuple[List[str], List[ClassifiedLink]]:
    """Split hrefs into unique normalized internal links and skipped external ones."""
    internal: List[str] = []
    external: List[ClassifiedLink] = []
    for href in hrefs:
        classified = classify_link(href, config)
        if classified.is_external:
            external.append(classified)
        elif classified.normalized not in internal:
            internal.append(classified.normalized)
    return internal, external


def resolve_link(link: str, config: VerifierConfig) -> str:
    """Turn an internal link into a fully-qualified URL against the base origin."""
    if link.startswith(("http://", "https://")):
        return link
    base = config.base_url.rstrip("/")
    return base + link if link.startswith("/") else f"{base}/{link}"


def default_content_check(body: str) -> Optional[str]:
    """Substring heuristics for "200 but not found" storefront pages."""
    lower_body = body.lower()

    if any(marker in lower_body for marker in NOT_FOUND_PAGE_MARKERS):
        return "Page not found content"

    # Missing collections/products still render with status 200
    if any(m in lower_body for m in RESOURCE_MARKERS) and "not found" in lower_body:
        return "Resource not found"

    return None


def check_content(
    body: str,
    link: str,
    config: VerifierConfig,
    content_check: ContentCheck = default_content_check,
) -> Optional[str]:
    """Return the reason a 2xx body is broken, or None if it looks valid."""
    # Homepage is never "broken" content-wise
    if link in config.root_urls:
        return None
    if not body.strip():
        return "Empty body"
    return content_check(body)


def verify_link(
    session: requests.Session,
    link: str,
    config: VerifierConfig,
    content_check: ContentCheck = default_content_check,
) -> Outcome:
    """Fetch a single internal link and decide its outcome."""
    result = fetch_page(session, resolve_link(link, config), config)

    if result.error is not None:
        return TransportError(link=link, error=result.error)
    if result.status >= 400:
        return Broken(link=link, status=result.status)

    reason = check_content(result.body, link, config, content_check)
    if reason:
        return Broken(link=link, status=result.status, reason=reason)
    return Good(link=link, status=result.status)


def verify_links(
    session: requests.Session,
    links: Iterable[str],
    config: VerifierConfig,
    report: Optional[RunReport] = None,
    content_check: ContentCheck = default_content_check,
    on_outcome: Optional[Callable[[Outcome], None]] = None,
) -> RunReport:
    """
    Verify links one at a time, in order.

    Each outcome is recorded in the report and passed to on_outcome as soon
    as it is produced.
    """
    report = report if report is not None else RunReport()
    for link in links:
        outcome = verify_link(session, link, config, content_check)
        report.record(outcome)
        if on_outcome:
            on_outcome(outcome)
    return report
