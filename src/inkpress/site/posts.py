"""
Enumerate posts, derive their URLs and dates, and aggregate their tags.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..template.loader import TemplateLoader
from ..template.options import DocumentOptions, TagRef, parse_options
from ..util import derive_date, escape_content, list_files, read_text_file, split_dated_name, strip_extension

logger = logging.getLogger(__name__)

T = TypeVar("T")
_UNSET = object()


class Deferred(Generic[T]):
    """
    Compute-once cell: the first :meth:`get` runs ``compute`` and caches its value.

    If ``compute`` raises, nothing is cached and the next access tries again.
    """

    def __init__(self, compute: Callable[[], T]) -> None:
        self._compute: Optional[Callable[[], T]] = compute
        self._value: object = _UNSET

    @property
    def evaluated(self) -> bool:
        return self._value is not _UNSET

    def get(self) -> T:
        if self._value is _UNSET:
            assert self._compute is not None
            self._value = self._compute()
            self._compute = None
        return self._value  # type: ignore[return-value]

    def __repr__(self) -> str:
        return "Deferred(evaluated)" if self.evaluated else "Deferred(pending)"


@dataclass
class Tag:
    """A tag with the number of posts carrying it."""

    name: str
    count: int
    url: Optional[str] = None


@dataclass
class PostEntry:
    """
    One post: its source, options, derived URL and date, and deferred content.

    Attributes:
        path: Post source file.
        name: Template name of the post (relative to the template directory).
        options: Parsed option header.
        url: Site-absolute URL of the rendered post.
        date: Post date (``date`` option, filename prefix, or mtime).
    """

    path: Path
    name: str
    options: DocumentOptions
    url: str
    date: date
    _content: Deferred[str] = field(repr=False, compare=False)

    @property
    def title(self) -> Optional[str]:
        return self.options.title

    @property
    def tags(self) -> Tuple[TagRef, ...]:
        return self.options.tags

    @property
    def tag(self) -> List[TagRef]:
        return list(self.options.tags)

    @property
    def content(self) -> str:
        """Rendered, escaped body without layout; computed on first access only."""
        return self._content.get()

    @property
    def lazy_content(self) -> str:
        return self.content


def derive_post_url(path: Path, extension: str, url_format: str) -> str:
    """
    Build a post URL from its dated filename.

    ``2024-05-01-hello.html.sx`` with ``{year}/{month}/{slug}`` gives
    ``/2024/05/hello.html``. Undated names use the file's date for the fields.
    """
    dated, rest = split_dated_name(path.name)
    when = dated or derive_date(path)
    slug = strip_extension(rest, extension)
    url = url_format.format(year=f"{when.year:04d}", month=f"{when.month:02d}", day=f"{when.day:02d}", slug=slug)
    return "/" + url.lstrip("/")


def sort_by_date(posts: Iterable[PostEntry]) -> List[PostEntry]:
    """Newest first; posts sharing a date keep their input order."""
    return sorted(posts, key=lambda post: post.date, reverse=True)


def get_tags(posts: Iterable[PostEntry], url_for: Optional[Callable[[str], str]] = None) -> List[Tag]:
    """
    Count tag occurrences across ``posts`` and sort the tags by name.
    """
    counts: Counter[str] = Counter(tag.name for post in posts for tag in post.tags)
    return [
        Tag(name=name, count=count, url=url_for(name) if url_for else None)
        for name, count in sorted(counts.items())
    ]


class PostCollection:
    """
    Load post entries from the post directory.

    Args:
        loader: Template loader, used for the extension and template names.
        post_dir: Directory holding post sources.
        url_format: Format string passed to :func:`derive_post_url`.
        render_content: Renders a post template name to markup (no layout).
    """

    def __init__(
        self,
        loader: TemplateLoader,
        post_dir: Path,
        url_format: str,
        render_content: Callable[[str], str],
    ) -> None:
        self.loader = loader
        self.post_dir = Path(post_dir)
        self.url_format = url_format
        self.render_content = render_content

    def files(self) -> List[Path]:
        return list_files(self.post_dir, self.loader.extension)

    def is_post(self, path: Path) -> bool:
        try:
            Path(path).resolve().relative_to(self.post_dir.resolve())
        except ValueError:
            return False
        return True

    def load(self, path: Path) -> PostEntry:
        options, _ = parse_options(read_text_file(path))
        name = self.loader.template_name(path)
        render = self.render_content

        def compute() -> str:
            logger.debug("Rendering content of post %s", name)
            return escape_content(render(name))

        return PostEntry(
            path=path,
            name=name,
            options=options,
            url=derive_post_url(path, self.loader.extension, self.url_format),
            date=options.date or derive_date(path),
            _content=Deferred(compute),
        )

    def get_posts(self, tags: Optional[Sequence[str]] = None) -> List[PostEntry]:
        """
        Return posts whose tags include every name in ``tags`` (all posts when None).
        """
        wanted = set(tags or ())
        posts: List[PostEntry] = []
        for path in self.files():
            entry = self.load(path)
            if wanted and not wanted.issubset(entry.options.tag_names):
                continue
            posts.append(entry)
        logger.debug("Loaded %d post(s) from %s", len(posts), self.post_dir)
        return posts
