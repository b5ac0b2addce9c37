"""Shared prompt styling for the terminal wizard."""

from questionary import Style

STYLE = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green bold"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("disabled", "fg:#858585 italic"),
    ]
)
