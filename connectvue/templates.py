# File: connectvue/templates.py
"""
protoc-gen-connect-vue - Template Renderer
===========================================

Renders a ``ServiceViewModel`` into the TypeScript output files:

    ============  ==================  ======================================
    Output        Template            Context
    ============  ==================  ======================================
    client.ts     ``client``          view model + config
    api.ts        ``api`` (+ ``rpc``) view model + config, ``rpc`` per method
    index.ts      ``index``           empty
    ============  ==================  ======================================

Template sources are read once, when the renderer is built, either from the
bundled ``templates/`` directory or from ``GenerationConfig.template_dir``.
They are registered under their short key (``client``, ``api``, ``rpc``,
``index``) so the api template pulls in the per-method partial with
``{% include "rpc" %}``.

Rendering uses ``StrictUndefined``: a template referring to a field the view
model doesn't have raises instead of silently emitting an empty string.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from jinja2 import DictLoader, Environment, StrictUndefined

from connectvue.models import GenerationConfig, ServiceViewModel
from connectvue.utils import read_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BUNDLED_TEMPLATE_DIR: Path = Path(__file__).resolve().parent / "templates"

CLIENT_TEMPLATE: str = "client"
API_TEMPLATE: str = "api"
RPC_PARTIAL: str = "rpc"
INDEX_TEMPLATE: str = "index"

# Template key → file name inside the template directory.
TEMPLATE_FILES: Mapping[str, str] = {
    CLIENT_TEMPLATE: "client.ts.jinja",
    API_TEMPLATE: "api.ts.jinja",
    RPC_PARTIAL: "rpc.ts.jinja",
    INDEX_TEMPLATE: "index.ts.jinja",
}


def load_template_sources(template_dir: Optional[Path] = None) -> Dict[str, str]:
    """
    Read every template in ``TEMPLATE_FILES`` from *template_dir*.

    Files missing from an override directory fall back to the bundled copy,
    so a project can override just the partial.

    Raises:
        FileNotFoundError: If a bundled template is missing.
    """
    sources: Dict[str, str] = {}
    for key, file_name in TEMPLATE_FILES.items():
        path: Path = BUNDLED_TEMPLATE_DIR / file_name
        if template_dir is not None and (template_dir / file_name).is_file():
            path = template_dir / file_name
            logger.info("Using template override: %s", path)
        sources[key] = read_file(path)
    return sources


class TemplateRenderer:
    """
    Stateless after construction; one instance can render many view models.

    Usage::

        renderer = TemplateRenderer(config)
        files = renderer.render_all(view_model)
        files["api.ts"]
    """

    def __init__(
        self,
        config: Optional[GenerationConfig] = None,
        *,
        sources: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Args:
            config: Generation settings (output file names, template dir).
            sources: Template text keyed like ``TEMPLATE_FILES``; when given,
                nothing is read from disk.
        """
        self._config: GenerationConfig = config or GenerationConfig()
        if sources is None:
            template_dir = Path(self._config.template_dir) if self._config.template_dir else None
            sources = load_template_sources(template_dir)

        missing = [key for key in TEMPLATE_FILES if key not in sources]
        if missing:
            raise ValueError(f"Missing template source(s): {', '.join(missing)}")

        self._env: Environment = Environment(
            loader=DictLoader(dict(sources)),
            undefined=StrictUndefined,
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        logger.debug("TemplateRenderer initialised with templates: %s.", sorted(sources))

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def build_context(self, view_model: ServiceViewModel) -> Dict[str, Any]:
        """Template context: the view model fields plus ``config``."""
        context: Dict[str, Any] = view_model.model_dump(mode="json")
        context["config"] = self._config.model_dump(mode="json")
        return context

    def render(self, template_key: str, context: Mapping[str, Any]) -> str:
        return self._env.get_template(template_key).render(**context)

    def render_client(self, view_model: ServiceViewModel) -> str:
        return self.render(CLIENT_TEMPLATE, self.build_context(view_model))

    def render_api(self, view_model: ServiceViewModel) -> str:
        return self.render(API_TEMPLATE, self.build_context(view_model))

    def render_index(self) -> str:
        return self.render(INDEX_TEMPLATE, {})

    def render_all(self, view_model: ServiceViewModel) -> Dict[str, str]:
        """
        Render every output for *view_model*, in output order.

        Returns:
            Mapping of output file name → content.  Any template error
            propagates and nothing is returned.
        """
        outputs: Tuple[Tuple[str, str], ...] = (
            (self._config.client_file, self.render_client(view_model)),
            (self._config.api_file, self.render_api(view_model)),
            (self._config.index_file, self.render_index()),
        )
        rendered: Dict[str, str] = dict(outputs)
        logger.info(
            "Rendered %d file(s) for %s: %s.",
            len(rendered),
            view_model.service_name,
            ", ".join(rendered),
        )
        return rendered


__all__ = [
    "API_TEMPLATE",
    "BUNDLED_TEMPLATE_DIR",
    "CLIENT_TEMPLATE",
    "INDEX_TEMPLATE",
    "RPC_PARTIAL",
    "TEMPLATE_FILES",
    "TemplateRenderer",
    "load_template_sources",
]
