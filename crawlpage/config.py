import os

# BeautifulSoup tree builder; "html.parser" works without lxml installed
HTML_PARSER = os.getenv("CRAWLPAGE_HTML_PARSER", "lxml")

# content types whose body gets parsed for links
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

# status code ranges, inclusive on both ends
SUCCESS_CODES = range(200, 227)
REDIRECT_CODES = range(300, 308)
NOT_FOUND_CODE = 404
