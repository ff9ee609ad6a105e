from typing import Optional

TICKET_LIST_TEMPLATE = "<br><br><ul><li><a href='{link}'>BUY TICKETS</a></li></ul>"


def clean_text(text: Optional[str]) -> Optional[str]:
    """
    Strips leading/trailing whitespace from element text.
    - Returns None if the input is None.
    - An element that exists but is blank yields an empty string, not None,
      so "found but empty" stays distinct from "not found".
    """
    if text is None:
        return None
    return text.strip()


def format_excerpt(excerpt: Optional[str], link: Optional[str]) -> str:
    """
    Builds the excerpt HTML fragment from the description and ticket link.

    | excerpt | link    | output                                        |
    |---------|---------|-----------------------------------------------|
    | present | present | <p>excerpt</p> + ticket list linking to link  |
    | present | absent  | <p>excerpt</p> + ticket list with href 'null' |
    | absent  | present | ticket list linking to link                   |
    | absent  | absent  | ''                                            |

    An excerpt without a ticket link still gets the ticket list, with the
    literal href 'null'.
    """
    if excerpt:
        rendered_link = "null" if link is None else link
        return f"<p>{excerpt}</p>" + TICKET_LIST_TEMPLATE.format(link=rendered_link)
    if link:
        return TICKET_LIST_TEMPLATE.format(link=link)
    return ""
