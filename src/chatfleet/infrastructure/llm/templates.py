"""Jinja2 template utilities for LLM components."""

from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape


@lru_cache(maxsize=1)
def create_jinja_env() -> Environment:
    """Create Jinja2 environment for LLM templates.

    Creates a configured Jinja2 environment that loads templates from
    the chatfleet.infrastructure.llm templates directory.

    Returns:
        Configured Jinja2 environment.
    """
    return Environment(
        loader=PackageLoader("chatfleet.infrastructure.llm", "templates"),
        autoescape=select_autoescape(default_for_string=False, default=False),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
    )


def render_followup_prompt(affirmative: bool, question: str) -> str:
    """Render the meta prompt used when the user answers a pending question.

    Args:
        affirmative: True for a yes answer, False for a no answer.
        question: The assistant question being answered.

    Returns:
        Prompt text to send as the user turn of a completion.
    """
    name = "followup_affirmative.j2" if affirmative else "followup_negative.j2"
    template = create_jinja_env().get_template(name)
    return template.render(question=question).strip()
