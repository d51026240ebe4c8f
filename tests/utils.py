import re

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")

# Whitespace plus the box-drawing characters Rich uses for help panels
LAYOUT_CHARS = re.compile(r"[\s│╭╮╰╯─]")


def clean_cli_output(output: str) -> str:
    """
    Strip ANSI codes, whitespace and Rich panel borders from CLI output so
    that assertions do not depend on terminal width.
    """
    return LAYOUT_CHARS.sub("", ANSI_ESCAPE.sub("", output))
