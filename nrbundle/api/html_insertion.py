# Copyright 2010 New Relic, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

_HEAD_START = b"<head>"
_BODY_END = b"</body>"


def is_html_content_type(content_type):
    # Only possible if the content type is text/html, optionally
    # followed by parameters such as the charset.

    ctype = (content_type or "").strip().lower()

    return ctype == "text/html" or ctype.startswith("text/html;")


def _as_bytes(text, encoding):
    if text is None:
        return b""
    if isinstance(text, bytes):
        return text
    return str(text).encode(encoding)


def insert_header(data, html_to_be_inserted, encoding="utf-8"):
    """Inserts the text returned by html_to_be_inserted() immediately after
    the first <head> element in data. The function is only called if there
    is somewhere to insert the text. Returns None if data was not changed.

    """

    start = data.find(_HEAD_START)

    if start == -1:
        return None

    text = _as_bytes(html_to_be_inserted(), encoding)

    if not text:
        return None

    end = start + len(_HEAD_START)

    return text.join((data[:end], data[end:]))


def insert_footer(data, html_to_be_inserted, encoding="utf-8"):
    """Inserts the text returned by html_to_be_inserted() immediately before
    the first </body> element in data. Returns None if data was not changed.

    """

    start = data.find(_BODY_END)

    if start == -1:
        return None

    text = _as_bytes(html_to_be_inserted(), encoding)

    if not text:
        return None

    return text.join((data[:start], data[start:]))


def insert_browser_timing(data, header=None, footer=None, encoding="utf-8"):
    """Applies header and footer insertion to data, either of which may be
    None to skip it. Returns the new content, or None if nothing changed.

    """

    changed = False

    if header is not None:
        content = insert_header(data, header, encoding)
        if content is not None:
            data = content
            changed = True

    if footer is not None:
        content = insert_footer(data, footer, encoding)
        if content is not None:
            data = content
            changed = True

    return data if changed else None
