"""
Generate the directory layout and starter templates of a new site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..config.models import DEFAULT_CONFIG_NAME
from ..util import write_text_file

CONFIG_TEMPLATE = """transformers = ["markdown", "external-links"]

[site]
name = "{name}"
url = "https://example.com"
"""

DEFAULT_LAYOUT = """; format: html5
[:head
  [:meta {:charset "utf-8"}]
  [:meta {:name "viewport" :content "width=device-width, initial-scale=1.0"}]
  [:link {:rel "alternate" :type "application/atom+xml" :href "/atom.xml"}]
  [:title (if (:title site) (str (:title site) " | " (:name site)) (:name site))]
  [:style "body { font-family: -apple-system, BlinkMacSystemFont, Roboto, Helvetica, Arial, sans-serif; background: #f7f7f7; color: #333; margin: 0 auto; padding: 20px; max-width: 800px; }
h1, h2 { color: #2F4F4F; }
a { color: #0066cc; text-decoration: none; font-weight: bold; }
a:hover { text-decoration: underline; }
.tag { margin-left: 0.5em; font-size: 0.9em; }
.footer-note { margin-top: 20px; font-size: 0.9em; color: #666; text-align: center; }"]]
[:body
  [:header [:h1 [:a {:href "/index.html"} (:name site)]]]
  [:main content]
  [:hr]
  [:div.footer-note "Built with inkpress."]]
"""

POST_LAYOUT = """; layout: default
[:article
  [:h2 (:title site)]
  [:p.meta
    (format-date (:date site) "%d %B %Y")
    (for [tag (:tag site)]
      [:a.tag {:href (:url tag)} (:name tag)])]
  content]
"""

TAG_LAYOUT = """; layout: default
[:h2 "Posts tagged " (:tag-name site)]
[:ul
  (for [post (:posts site)]
    [:li [:a {:href (:url post)} (:title post)] " " [:small (format-date (:date post))]])]
"""

INDEX_TEMPLATE = """; layout: default
; title: Home
[:h2 "Recent posts"]
[:ul
  (for [post (take 10 (:posts site))]
    [:li [:a {:href (:url post)} (:title post)] " " [:small (format-date (:date post))]])]
[:h2 "Tags"]
[:ul
  (for [tag (:tags site)]
    [:li [:a {:href (:url tag)} (:name tag)] (str " (" (:count tag) ")")])]
"""

FEED_TEMPLATE = """; title: Feed
"<?xml version=\\"1.0\\" encoding=\\"utf-8\\"?>"
[:feed {:xmlns "http://www.w3.org/2005/Atom"}
  [:title (:name site)]
  [:link {:href (:url site)}]
  [:id (:url site)]
  [:updated (format-date (:date (first (:posts site))) "%Y-%m-%dT00:00:00Z")]
  (for [post (:posts site)]
    [:entry
      [:title (:title post)]
      [:link {:href (str (:url site) (:url post))}]
      [:id (str (:url site) (:url post))]
      [:updated (format-date (:date post) "%Y-%m-%dT00:00:00Z")]
      [:content {:type "html"} (:content post)]])]
"""

WELCOME_POST = """; layout: post
; title: Welcome to inkpress
; tag: inkpress, meta
[:markdown "Posts are **s-expression** documents with a small option header.

- edit the files under `template/_posts`
- run `inkpress build`"]
[:p "Pages are written to the " [:code "public"] " directory. "
  [:a {:href "https://example.com"} "Read more"] "."]
"""


@dataclass
class ScaffoldReport:
    """
    Stores what changed when scaffolding ran.

    Attributes:
        root: The site directory.
        directories_created: Newly created folders.
        files_written: Newly written (or forcibly rewritten) files.
        files_skipped: Existing files left untouched.
    """
    root: Path
    directories_created: List[Path] = field(default_factory=list)
    files_written: List[Path] = field(default_factory=list)
    files_skipped: List[Path] = field(default_factory=list)

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Root", str(self.root))
        yield ("Directories created", str(len(self.directories_created)))
        yield ("Files written", str(len(self.files_written)))
        yield ("Files skipped", str(len(self.files_skipped)))


def ensure_directory(path: Path, report: ScaffoldReport) -> None:
    """
    Create a directory if it doesn't exist and record the action.
    """
    if not path.exists():
        path.mkdir(parents=True, exist_ok=True)
        report.directories_created.append(path)


def write_starter_file(target: Path, content: str, force: bool, report: ScaffoldReport) -> None:
    """
    Write a starter file if it doesn't exist or if forced.

    Args:
        target: Path to write.
        content: File content.
        force: If True, overwrite existing files.
        report: Report object to update.
    """
    if target.exists() and not force:
        report.files_skipped.append(target)
        return
    write_text_file(target, content)
    report.files_written.append(target)


def starter_files(name: str, today: Optional[date] = None) -> Dict[str, str]:
    """
    Map of site-relative paths to the content of a working starter site.
    """
    today = today or date.today()
    return {
        DEFAULT_CONFIG_NAME: CONFIG_TEMPLATE.format(name=name.replace('"', "'")),
        "template/_layouts/default.sx": DEFAULT_LAYOUT,
        "template/_layouts/post.sx": POST_LAYOUT,
        "template/_layouts/tag.sx": TAG_LAYOUT,
        "template/index.html.sx": INDEX_TEMPLATE,
        "template/atom.xml.sx": FEED_TEMPLATE,
        f"template/_posts/{today:%Y-%m-%d}-welcome.html.sx": WELCOME_POST,
    }


def generate_site_skeleton(
    root: Path | str,
    *,
    name: Optional[str] = None,
    force: bool = False,
    today: Optional[date] = None,
) -> ScaffoldReport:
    """
    Create a starter site (config, layouts, index page, feed and a welcome post).

    Args:
        root: Directory to create the site in.
        name: Site name written to ``site.toml`` (defaults to the directory name).
        force: If True, overwrite existing files.
        today: Date used for the welcome post's filename.

    Returns:
        A ScaffoldReport detailing the actions taken.
    """
    site_root = Path(root).expanduser().resolve()
    report = ScaffoldReport(root=site_root)
    ensure_directory(site_root, report)
    for relative, content in starter_files(name or site_root.name, today).items():
        target = site_root / relative
        ensure_directory(target.parent, report)
        write_starter_file(target, content, force, report)
    return report
