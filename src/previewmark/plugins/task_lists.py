"""Task list plugin for previewmark.

Renders ``- [ ]`` and ``- [x]`` list items as disabled checkboxes, without
wrapping labels.

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mdit_py_plugins.tasklists import tasklists_plugin

from previewmark.plugins import RenderServices, register_plugin

if TYPE_CHECKING:
    from previewmark.registry import ExtensionRegistryBuilder


@register_plugin("task_lists")
class TaskListPlugin:
    """Plugin adding task list checkboxes."""

    @property
    def name(self) -> str:
        return "task_lists"

    def register(self, builder: ExtensionRegistryBuilder, services: RenderServices) -> None:
        builder.use(tasklists_plugin, enabled=False, label=False, label_after=False)
