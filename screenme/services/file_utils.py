"""
File path helpers for saving screenshots.
"""

from pathlib import Path

PNG_FILTER = "PNG Files (*.png)"
JPEG_FILTER = "JPEG Files (*.jpg *.jpeg)"


def get_unique_file_path(folder: str, base_name: str, extension: str) -> str:
    """
    Build a path in folder that does not collide with an existing file.

    The first candidate is "<base_name>.<extension>"; on collision a
    counter is appended: "<base_name>_1.<extension>", "<base_name>_2...".

    Args:
        folder: Target directory. It is not created here.
        base_name: File name without extension.
        extension: Extension with or without a leading dot.

    Returns:
        The chosen path as a string.
    """
    extension = extension.lstrip(".")
    directory = Path(folder).expanduser()

    candidate = directory / f"{base_name}.{extension}"
    counter = 1
    while candidate.exists():
        candidate = directory / f"{base_name}_{counter}.{extension}"
        counter += 1

    return str(candidate)


def build_file_filter(extension: str) -> str:
    """
    Build a QFileDialog name filter string for the configured extension.

    Unknown extensions offer both PNG and JPEG.
    """
    extension = extension.lower().lstrip(".")
    if extension == "png":
        return f"{PNG_FILTER};;"
    if extension in ("jpg", "jpeg"):
        return f"{JPEG_FILTER};;"
    return f"{PNG_FILTER};;{JPEG_FILTER};;"
