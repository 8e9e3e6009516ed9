"""Prompt templates for summaries and tag extraction.

All three prompts share the same framing: ignore page chrome, answer in
plain text with no markdown and no chatty preamble.
"""

CONTENT_FRAMING = """You are processing the text of an article, blog post or video. IGNORE everything that is not part of the actual content:
- JavaScript or browser warnings ("Please enable JavaScript")
- Cookie banners and privacy notices
- Navigation menus, headers, footers, breadcrumbs and sidebars
- Advertisements and promotional copy
- Social sharing buttons, newsletter and subscription prompts
- Copyright notices and legal boilerplate
- Comment sections

Work ONLY with the main ideas, key points and takeaways of the content itself.

OUTPUT RULES (STRICT):
1. Plain text only. Do not use markdown: no # headers, no * or ** emphasis,
   no _ underscores, no [links](...), no bullet lists.
2. No conversational framing. Never write "I'd be happy to", "Here is",
   "Let me know", "Feel free", or any first-person or meta commentary.
   Start directly with the answer."""

SHORT_SUMMARY_PROMPT = """{framing}

TASK: Write a summary of 1-2 sentences, at most 200 characters in total.

CONTENT:
{content}"""

EXTENDED_SUMMARY_PROMPT = """{framing}

TASK: Write a comprehensive summary of 5-10 sentences covering the main ideas,
key points and important details.

CONTENT:
{content}"""

TAGS_PROMPT = """{framing}

TASK: Extract up to 10 tags describing the main topics, themes and subjects.
Prefer single words; use at most 2-3 words per tag. Be specific.
Return ONLY a comma-separated list of tags, starting with the first tag.

CONTENT:
{content}"""


def short_summary_prompt(content: str) -> str:
    return SHORT_SUMMARY_PROMPT.format(framing=CONTENT_FRAMING, content=content)


def extended_summary_prompt(content: str) -> str:
    return EXTENDED_SUMMARY_PROMPT.format(framing=CONTENT_FRAMING, content=content)


def tags_prompt(content: str) -> str:
    return TAGS_PROMPT.format(framing=CONTENT_FRAMING, content=content)
