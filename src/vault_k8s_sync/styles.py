"""Styling for the interactive kube context prompt.

Only used when ``--select`` asks the user to pick a context from the
local kubeconfig.
"""

from questionary import Style

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#5fafff bold"),
        ("question", "bold"),
        ("answer", "fg:#87d787 bold"),
        ("pointer", "fg:#87d787 bold"),
        ("highlighted", "fg:#1c1c1c bg:#87d787 bold"),
        ("selected", "fg:#87d787"),
        ("instruction", "fg:#6c6c6c italic"),
        ("text", ""),
        ("disabled", "fg:#585858 italic"),
    ]
)

POINTER = "❯ "
QMARK = "? "
