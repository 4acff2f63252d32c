"""
Site builder ties together the template compiler, posts, serialization and output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..config import SiteConfig
from ..render import serialize, serialize_nodes
from ..site import PostCollection, PostEntry, Tag, build_site_context, get_tags, sort_by_date
from ..template import Document, Renderer, TemplateCompiler, TemplateLoader
from ..transform import BUILTIN_TRANSFORMERS, TransformPipeline, default_pipeline
from ..util import derive_date, list_files, short_digest, slugify, strip_extension, write_text_file

logger = logging.getLogger(__name__)

Serializer = Callable[..., str]
Writer = Callable[[Path, str], Any]


@dataclass
class BuildReport:
    """
    Outcome of a build.

    Attributes:
        root: Public directory pages were written to.
        written: Unit label (``template:<name>`` / ``tag:<name>``) to output path.
        failures: Unit label to error message for units that failed.
    """
    root: Path
    written: Dict[str, Path] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Output directory", str(self.root))
        yield ("Pages written", str(len(self.written)))
        yield ("Failures", str(len(self.failures)))


def install_transformers(config: SiteConfig, pipeline: Optional[TransformPipeline] = None) -> TransformPipeline:
    """
    Append the transformers named in the config to ``pipeline`` (default: process-wide).

    Transformers already registered are not added a second time.
    """
    target = pipeline if pipeline is not None else default_pipeline()
    for name in config.transformers:
        transformer = BUILTIN_TRANSFORMERS[name]
        if transformer in target.registry:
            continue
        target.add_transformer(transformer)
        logger.debug("Installed transformer '%s'", name)
    return target


class SiteBuilder:
    """
    Render and write the pages of one site.

    Every compile method is fail-soft per unit: errors are logged, recorded in
    :attr:`report`, and reported as ``False``. The ``compile_all_*`` methods
    attempt every unit and return True only if all of them succeeded.
    """

    def __init__(
        self,
        config: SiteConfig,
        *,
        pipeline: Optional[TransformPipeline] = None,
        serializer: Serializer = serialize,
        writer: Writer = write_text_file,
    ) -> None:
        self.config = config
        self.loader = TemplateLoader.from_config(config)
        self.compiler = TemplateCompiler(self.loader, pipeline)
        self.serializer = serializer
        self.writer = writer
        self.posts = PostCollection(
            self.loader,
            config.post_path,
            config.post_url_format,
            render_content=self.render_content,
        )
        self.report = BuildReport(root=config.public_path)

    # Paths and URLs

    def tag_slugs(self, names: Optional[Iterable[str]] = None) -> Dict[str, str]:
        """
        Map tag names to output slugs, unique across ``names`` (default: every post tag).

        Names whose slugs clash (``C++`` and ``c``) each get a digest of the
        raw name appended, so no tag page overwrites another.
        """
        if names is None:
            names = [tag.name for post in self.posts.get_posts() for tag in post.tags]
        groups: Dict[str, List[str]] = {}
        for name in sorted(set(names)):
            groups.setdefault(slugify(name), []).append(name)
        slugs: Dict[str, str] = {}
        for slug, group in groups.items():
            for name in group:
                slugs[name] = slug if len(group) == 1 else f"{slug}-{short_digest(name)}"
        return slugs

    def tag_url(self, tag_name: str, slugs: Optional[Mapping[str, str]] = None) -> str:
        if slugs is None:
            slugs = self.tag_slugs()
        slug = slugs.get(tag_name) or slugify(tag_name)
        return f"/{self.config.tag_dir.strip('/')}/{slug}.html"

    def tag_output_path(self, tag_name: str) -> Path:
        return self.config.public_path / self.tag_url(tag_name).lstrip("/")

    def template_output_path(self, name: str) -> Path:
        path = self.loader.template_path(name)
        if self.posts.is_post(path):
            entry = self.posts.load(path)
            return self.config.public_path / entry.url.lstrip("/")
        return self.config.public_path / strip_extension(name, self.loader.extension)

    def template_names(self) -> List[str]:
        """All page and post templates; layouts are excluded."""
        return [
            self.loader.template_name(path)
            for path in list_files(self.loader.template_dir, self.loader.extension)
            if not self.loader.is_layout(path)
        ]

    # Rendering

    def get_posts(self, tags: Optional[List[str]] = None) -> List[PostEntry]:
        return sort_by_date(self.posts.get_posts(tags))

    def get_tags(self, posts: Optional[List[PostEntry]] = None) -> List[Tag]:
        if posts is None:
            posts = self.posts.get_posts()
        slugs = self.tag_slugs()
        return get_tags(posts, url_for=lambda name: self.tag_url(name, slugs))

    def _document(self, renderer: Renderer, site: Mapping[str, Any]) -> Document:
        options = renderer.options
        meta = {"format": options.format, "lang": options.lang or self.config.lang}
        return Document(nodes=renderer(site), meta=meta)

    def _template_date(self, name: str, renderer: Renderer) -> date:
        if renderer.options.date is not None:
            return renderer.options.date
        return derive_date(self.loader.template_path(name))

    def generate_html(self, name: str, *, allow_layout: bool = True) -> Document:
        """
        Render template ``name`` against a freshly built site context.

        The document's own ``tag`` entries are the site-wide :class:`Tag`
        records, so templates can link them through ``url``.
        """
        renderer = self.compiler.compile_template(name, allow_layout=allow_layout)
        posts = self.get_posts()
        tags = self.get_tags(posts)
        fields: Dict[str, Any] = {"posts": posts, "tags": tags, "lang": self.config.lang}
        fields.update(renderer.options.as_fields())
        if "tag" in fields:
            by_name = {tag.name: tag for tag in tags}
            fields["tag"] = [
                by_name.get(ref.name) or Tag(ref.name, 0, self.tag_url(ref.name)) for ref in fields["tag"]
            ]
        fields["date"] = self._template_date(name, renderer)
        site = build_site_context(self.config.site, **fields)
        return self._document(renderer, site)

    def generate_tag_html(self, tag_name: str) -> Document:
        """
        Render the tag layout with the posts carrying ``tag_name``.
        """
        renderer = self.compiler.layouts.get_layout(self.config.tag_layout)
        fields: Dict[str, Any] = {"lang": self.config.lang}
        fields.update(renderer.options.as_fields())
        fields.update(
            posts=self.get_posts([tag_name]),
            tags=self.get_tags(),
            tag_name=tag_name,
        )
        site = build_site_context(self.config.site, **fields)
        return self._document(renderer, site)

    def render_content(self, name: str) -> str:
        """Markup of a template's own body, without its layouts."""
        return serialize_nodes(self.generate_html(name, allow_layout=False).nodes)

    # Compilation

    def _compile(self, label: str, output: Callable[[], Path], produce: Callable[[], Document]) -> bool:
        try:
            target = output()
            document = produce()
            text = self.serializer(document, lang=self.config.lang)
            self.writer(target, text)
        except Exception as exc:
            logger.error("Failed to compile %s: %s", label, exc, exc_info=True)
            self.report.failures[label] = str(exc)
            return False
        self.report.written[label] = target
        self.report.failures.pop(label, None)
        logger.info("Compiled %s → %s", label, target)
        return True

    def compile_template(self, name: str) -> bool:
        """Render, serialize and write one template. Returns True on success."""
        return self._compile(
            f"template:{name}",
            lambda: self.template_output_path(name),
            lambda: self.generate_html(name),
        )

    def compile_tag(self, tag_name: str) -> bool:
        """Render, serialize and write one tag page. Returns True on success."""
        return self._compile(
            f"tag:{tag_name}",
            lambda: self.tag_output_path(tag_name),
            lambda: self.generate_tag_html(tag_name),
        )

    def compile_all_templates(self) -> bool:
        names = self.template_names()
        logger.info("Compiling %d template(s) from %s", len(names), self.loader.template_dir)
        results = [self.compile_template(name) for name in names]
        return all(results)

    def compile_all_tags(self) -> bool:
        tags = self.get_tags()
        logger.info("Compiling %d tag page(s)", len(tags))
        results = [self.compile_tag(tag.name) for tag in tags]
        return all(results)

    def build(self) -> BuildReport:
        """Compile every template, then every tag page."""
        self.report = BuildReport(root=self.config.public_path)
        templates_ok = self.compile_all_templates()
        tags_ok = self.compile_all_tags()
        if templates_ok and tags_ok:
            logger.info("Build finished: %d page(s) written", len(self.report.written))
        else:
            logger.warning("Build finished with %d failure(s)", len(self.report.failures))
        return self.report
