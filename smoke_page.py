"""
Quick smoke test, run with: python smoke_page.py
Builds a page from inline HTML and prints what a crawler would see.
"""

import logging

from crawlpage import Page

logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

SAMPLE_HTML = """
<html>
<head>
    <title>Camping gear</title>
    <meta http-equiv="Refresh" content="5;URL=http://example.com/moved">
</head>
<body>
    <a href="/tents#top">Tents</a>
    <a href="sleeping-bags/">Sleeping bags</a>
    <a href="http://www.example.com/stoves">Stoves</a>
    <a href="http://elsewhere.org/">Partner site</a>
    <a href="/login" rel="nofollow">Log in</a>
    <a href="/broken%ff">Broken</a>
</body>
</html>
"""


def main():
    page = Page(
        url="http://example.com/gear/",
        code=200,
        headers={"Content-Type": "text/html; charset=utf-8"},
        body=SAMPLE_HTML,
        depth=1,
        referer="http://example.com/",
    )
    page.user_data.source = "smoke"

    print("links:")
    for link in page.links:
        print("  ", link)
    print("-" * 80)

    page.discard_document()
    print(page.to_json())


if __name__ == "__main__":
    main()
