"""Composition root for the UI layer.

``create_bridge()`` wires the backend service, chat aggregator factory and
draft generator from one frozen configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from intake_bridge.adapters.gemini import GoogleGenAIAdapter
from intake_bridge.config import FrozenConfig, resolve_config
from intake_bridge.extensions.chat import ChatAggregator, default_system_instruction
from intake_bridge.generation.draft import DraftGenerator
from intake_bridge.services.attachments import collect_attachments
from intake_bridge.services.backend import BackendService

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from pathlib import Path

    from intake_bridge.adapters.base import GenerationAdapter
    from intake_bridge.core.models import Attachment
    from intake_bridge.extensions.chat import ChatEntry


@dataclass(frozen=True)
class IntakeBridge:
    config: FrozenConfig
    backend: BackendService
    drafts: DraftGenerator
    generation: GenerationAdapter

    def new_chat(
        self,
        *,
        system_instruction: str | None = None,
        on_update: Callable[[tuple[ChatEntry, ...]], None] | None = None,
    ) -> ChatAggregator:
        return ChatAggregator(
            self.generation,
            system_instruction=system_instruction
            or default_system_instruction(self.config.brand_name),
            on_update=on_update,
        )

    def collect_attachments(self, files: Iterable[str | Path]) -> list[Attachment]:
        """Encode local files, skipping those over the configured size limit."""
        return collect_attachments(files, max_bytes=self.config.max_attachment_bytes)


def create_bridge(
    config: FrozenConfig | None = None,
    *,
    generation: GenerationAdapter | None = None,
) -> IntakeBridge:
    """Build an :class:`IntakeBridge`, resolving configuration if none is given."""
    cfg = config or resolve_config().to_frozen()
    adapter = generation or GoogleGenAIAdapter(cfg.gemini_api_key, model=cfg.model)
    return IntakeBridge(
        config=cfg,
        backend=BackendService(cfg),
        drafts=DraftGenerator(
            adapter, company_name=cfg.company_name, brand=cfg.brand_name
        ),
        generation=adapter,
    )
