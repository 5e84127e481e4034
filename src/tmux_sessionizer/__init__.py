"""
tmux-sessionizer

Fuzzy-pick a project directory or a live tmux session and switch to it.
Numbered session commands open in fixed windows or split panes of the
current session and are reused instead of spawned again.

Configuration: ~/.config/tmux-sessionizer/tmux-sessionizer.toml (XDG standard)
"""

__version__ = "0.1.0"
