"""Unit tests for the structured macro preprocessor."""

from confluence_markdown_converter.macros import parameter
from confluence_markdown_converter.macros import preprocess_macros


def macro(name: str, inner: str = "") -> str:
    return f'<ac:structured-macro ac:name="{name}" ac:schema-version="1">{inner}</ac:structured-macro>'


def plain_body(text: str) -> str:
    return f"<ac:plain-text-body><![CDATA[{text}]]></ac:plain-text-body>"


def rich_body(html: str) -> str:
    return f"<ac:rich-text-body>{html}</ac:rich-text-body>"


def param(name: str, value: str) -> str:
    return f'<ac:parameter ac:name="{name}">{value}</ac:parameter>'


class TestCodeMacros:
    """Code and noformat macros become pre/code blocks."""

    def test_code_macro_with_language(self):
        """The language parameter becomes a language- class."""
        body = macro("code", param("language", "python") + plain_body("print('hi')"))
        html, warnings = preprocess_macros(body)
        assert html == "<pre><code class=\"language-python\">print('hi')</code></pre>"
        assert warnings == []

    def test_code_macro_without_language(self):
        """A missing language yields an empty language class."""
        html, _ = preprocess_macros(macro("code", plain_body("x = 1")))
        assert '<code class="language-">x = 1</code>' in html

    def test_code_body_is_html_escaped(self):
        """Markup inside CDATA is escaped so it survives as literal text."""
        html, _ = preprocess_macros(macro("code", plain_body("if a < b && c > d:")))
        assert "if a &lt; b &amp;&amp; c &gt; d:" in html

    def test_code_macro_without_body_keeps_wrapper(self):
        """A code macro with no body still produces an empty block."""
        html, warnings = preprocess_macros(macro("code", param("language", "sql")))
        assert html == '<pre><code class="language-sql"></code></pre>'
        assert warnings == []

    def test_noformat_macro(self):
        html, _ = preprocess_macros(macro("noformat", plain_body("plain text here")))
        assert html == "<pre><code>plain text here</code></pre>"

    def test_macro_name_is_case_insensitive(self):
        html, warnings = preprocess_macros(macro("CODE", plain_body("x")))
        assert "<pre><code" in html
        assert warnings == []


class TestPanelMacros:
    """Info, note, warning and tip panels become labelled blockquotes."""

    def test_info_panel(self):
        html, _ = preprocess_macros(macro("info", rich_body("<p>This is informational</p>")))
        assert html == (
            "<blockquote><p><strong>[i] INFO:</strong></p>"
            "<p>This is informational</p></blockquote>"
        )

    def test_panel_glyphs(self):
        """Each panel kind carries its own marker."""
        for name, label in (
            ("note", "[!] NOTE:"),
            ("warning", "[!!] WARNING:"),
            ("tip", "[*] TIP:"),
        ):
            html, _ = preprocess_macros(macro(name, rich_body("<p>x</p>")))
            assert f"<strong>{label}</strong>" in html

    def test_panel_without_rich_body_uses_raw_content(self):
        html, _ = preprocess_macros(macro("note", "<p>loose content</p>"))
        assert "<p>loose content</p></blockquote>" in html

    def test_panel_containing_code_macro(self):
        """Leaf macros inside a panel are converted before the panel."""
        inner = rich_body(macro("code", param("language", "bash") + plain_body("ls -la")))
        html, warnings = preprocess_macros(macro("tip", inner))
        assert '<pre><code class="language-bash">ls -la</code></pre></blockquote>' in html
        assert warnings == []


class TestInlineMacros:
    """Expand, jira and anchor macros."""

    def test_expand_with_title(self):
        body = macro("expand", param("title", "More") + rich_body("<p>Hidden</p>"))
        html, _ = preprocess_macros(body)
        assert html == "<details><summary>More</summary><p>Hidden</p></details>"

    def test_expand_default_title(self):
        html, _ = preprocess_macros(macro("expand", rich_body("<p>Hidden</p>")))
        assert "<summary>Details</summary>" in html

    def test_jira_macro(self):
        html, warnings = preprocess_macros(macro("jira", param("key", "PROJ-123")))
        assert html == "<code>PROJ-123</code>"
        assert warnings == []

    def test_jira_without_key_is_unsupported(self):
        html, warnings = preprocess_macros(macro("jira", param("server", "JIRA")))
        assert warnings == ["Unsupported macro removed: jira"]
        assert "<!-- Unsupported Confluence macro: jira -->" in html

    def test_anchor_macro(self):
        html, _ = preprocess_macros(macro("anchor", param("", "top")))
        assert html == '<a id="top"></a>'


class TestUnsupportedMacros:
    """Unknown macros are replaced by a comment and reported."""

    def test_unknown_macro_warning(self):
        html, warnings = preprocess_macros(macro("custom-unknown-macro", param("a", "b")))
        assert warnings == ["Unsupported macro removed: custom-unknown-macro"]
        assert html == "<!-- Unsupported Confluence macro: custom-unknown-macro -->"

    def test_self_closing_macro(self):
        html, warnings = preprocess_macros('<p>a</p><ac:structured-macro ac:name="gallery" /><p>b</p>')
        assert warnings == ["Unsupported macro removed: gallery"]
        assert html == "<p>a</p><!-- Unsupported Confluence macro: gallery --><p>b</p>"

    def test_warnings_follow_document_order(self):
        body = macro("first-macro") + "<p>text</p>" + macro("second-macro")
        _, warnings = preprocess_macros(body)
        assert warnings == [
            "Unsupported macro removed: first-macro",
            "Unsupported macro removed: second-macro",
        ]

    def test_no_macro_markup_survives(self):
        """Every macro is either converted or replaced."""
        body = macro("info", rich_body("<p>x</p>")) + macro("roadmap") + macro("code", plain_body("y"))
        html, _ = preprocess_macros(body)
        assert "ac:structured-macro" not in html
        assert "ac:" not in html


class TestNamespaceStripping:
    """Residual ac: and ri: tags are removed."""

    def test_strips_link_markup(self):
        html, warnings = preprocess_macros(
            '<p>See <ac:link><ri:page ri:content-title="Other" /></ac:link> here</p>'
        )
        assert html == "<p>See  here</p>"
        assert warnings == []

    def test_strips_image_markup_keeps_text(self):
        html, _ = preprocess_macros(
            '<ac:image ac:height="250"><ri:attachment ri:filename="a.png"></ri:attachment></ac:image>ok'
        )
        assert html == "ok"

    def test_plain_html_untouched(self):
        source = "<h1>Title</h1><p>Body with <strong>bold</strong></p>"
        assert preprocess_macros(source) == (source, [])


class TestParameter:
    def test_missing_parameter(self):
        assert parameter(param("title", "x"), "key") is None

    def test_parameter_value_is_trimmed(self):
        assert parameter(param("key", "  ABC-1 "), "key") == "ABC-1"
