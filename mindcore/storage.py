"""File helpers for saving and loading mind map documents."""

import logging
from pathlib import Path
from typing import Optional, Union

from mindcore.config import EditorSettings
from mindcore.editor import MindMapEditor

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SETTINGS_FILE = "settings.json"


def get_data_dir(base: Optional[PathLike] = None) -> Path:
    """Get the application data directory."""
    data_dir = Path(base) if base is not None else Path.home() / ".local" / "share" / "mindcore"
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_export_dir(base: Optional[PathLike] = None) -> Path:
    """Get the default export directory."""
    export_dir = get_data_dir(base) / "exports"
    export_dir.mkdir(exist_ok=True)
    return export_dir


def save_document(editor: MindMapEditor, filepath: PathLike) -> Path:
    """Write the editor's structured document to ``filepath``."""
    path = Path(filepath)
    path.write_text(editor.export_document(), encoding="utf-8")
    logger.debug("Saved document to %s", path)
    return path


def load_document(editor: MindMapEditor, filepath: PathLike):
    """Replace the editor's document with the one stored at ``filepath``."""
    path = Path(filepath)
    editor.import_document(path.read_text(encoding="utf-8"))
    logger.debug("Loaded document from %s", path)


def export_outline_file(editor: MindMapEditor, filepath: PathLike) -> Path:
    """Export the editor's tree as a Markdown outline."""
    path = Path(filepath)
    path.write_text(editor.export_outline(), encoding="utf-8")
    return path


def import_outline_file(editor: MindMapEditor, filepath: PathLike) -> bool:
    """Import a Markdown outline file. See MindMapEditor.import_outline."""
    path = Path(filepath)
    return editor.import_outline(path.read_text(encoding="utf-8"))


def load_settings(base: Optional[PathLike] = None) -> EditorSettings:
    """Read editor settings from the data directory, or return defaults."""
    path = get_data_dir(base) / SETTINGS_FILE
    if not path.exists():
        return EditorSettings()
    return EditorSettings.from_json(path.read_text(encoding="utf-8"))


def save_settings(settings: EditorSettings, base: Optional[PathLike] = None) -> Path:
    path = get_data_dir(base) / SETTINGS_FILE
    path.write_text(settings.to_json(), encoding="utf-8")
    return path
