"""Shared test fixtures for rssproxy."""

import os

import pytest

# Keep tests independent of any local .env
os.environ["INSECURE_TLS_HOSTS"] = "[]"
os.environ["FETCH_TIMEOUT"] = "15"

from rssproxy.config import reset_settings


@pytest.fixture(autouse=True)
def _reset_config():
    """Reset settings singleton between tests."""
    reset_settings()
    yield
    reset_settings()


SAMPLE_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:media="http://search.yahoo.com/mrss/">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com/</link>
    <description>A feed for tests</description>
    <language>en-us</language>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid isPermaLink="false">urn:example:1</guid>
      <description>This is the first article summary.</description>
      <content:encoded><![CDATA[<p>Full body</p><img src="https://example.com/inline-1.jpg">]]></content:encoded>
      <dc:creator>Jane Doe</dc:creator>
      <category>Tech</category>
      <category>News</category>
      <media:content url="https://example.com/media-1.jpg" medium="image" />
      <pubDate>Wed, 05 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <description><![CDATA[<p>Second <img src="https://example.com/inline-2.jpg"> summary.</p>]]></description>
      <pubDate>Wed, 05 Feb 2026 09:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Third Article</title>
      <link>https://example.com/article-3</link>
      <description>This is the third article.</description>
      <enclosure url="https://example.com/episode-3.mp3" type="audio/mpeg" length="1234" />
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Atom Test</title>
  <subtitle>Atom subtitle</subtitle>
  <link href="https://atom.example.org/"/>
  <updated>2026-02-05T12:00:00Z</updated>
  <id>urn:uuid:feed</id>
  <entry>
    <title>Atom Entry One</title>
    <link href="https://atom.example.org/one"/>
    <id>urn:uuid:entry-1</id>
    <published>2026-02-04T08:00:00Z</published>
    <updated>2026-02-05T08:00:00Z</updated>
    <author><name>Alice</name></author>
    <summary>Entry one summary</summary>
  </entry>
  <entry>
    <title>Atom Entry Two</title>
    <link href="https://atom.example.org/two"/>
    <id>urn:uuid:entry-2</id>
    <updated>2026-02-03T08:00:00Z</updated>
    <content type="html">&lt;p&gt;Entry two body&lt;/p&gt;</content>
  </entry>
</feed>"""

MALFORMED_RSS = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>Broken Feed</title>
<item><title>Recovered One</title><link>https://broken.example.com/1</link><description>unclosed <b>bold</description></item>
<item><title>Recovered Two</title><link>https://broken.example.com/2</link></item>
</channel></rss>"""


@pytest.fixture
def sample_rss() -> str:
    return SAMPLE_RSS


@pytest.fixture
def sample_atom() -> str:
    return SAMPLE_ATOM


@pytest.fixture
def malformed_rss() -> str:
    return MALFORMED_RSS
