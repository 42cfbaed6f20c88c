#!/usr/bin/env python3
"""
Quick Start Guide for the Strict Markup parser.

This example walks through parsing, error handling, tree building,
rendering and late binding of opaque placeholders.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from strict_markup import (
    MarkupParser,
    Opaque,
    ParseError,
    ParserConfig,
    bind,
    new_element,
    parse,
    render,
)
from strict_markup.tree import add, select


def quick_start_example():
    """Quick start example showing basic usage."""

    print("🚀 QUICK START - Strict Markup")
    print("=" * 45)

    # Step 1: Parse a document
    print("\n📄 Step 1: Parsing")
    print("-" * 30)

    tree = parse('<div id="main" class="box wide"><p>Fish &amp; chips</p><br></div>')
    print(f"✅ Root <{tree.tag}> id={tree.id!r} class={tree.class_!r}")
    print(f"📝 Text: {tree.text()!r}")

    # Step 2: Malformed input comes back as a value
    print("\n🔍 Step 2: Error Handling")
    print("-" * 30)

    for text in ("<div><p>text", "<p>&copy;</p>", "<a></a><b></b>"):
        result = parse(text)
        if isinstance(result, ParseError):
            print(f"❌ {type(result).__name__}: {result}")

    # Step 3: Build and transform trees
    print("\n🌳 Step 3: Trees")
    print("-" * 30)

    menu = new_element("ul", {"id": "menu"}, [
        new_element("li", content="Home"),
        new_element("li", content="About"),
    ])
    menu = add(menu, new_element("li", content="Contact"), tag="ul")
    print(f"✅ Menu items: {[li.text() for li in select(menu, 'li')]}")

    # Step 4: Render
    print("\n🖨️  Step 4: Rendering")
    print("-" * 30)

    print(render(menu))
    print(render(new_element("div", {"_role": "note"}, "a < b")))

    # Step 5: Opaque placeholders
    print("\n🧩 Step 5: Late Binding")
    print("-" * 30)

    page = render(new_element("main", content=[Opaque("body")]))
    print(f"Chunks: {page!r}")
    print(bind(page, lambda chunk: new_element("p", content=f"resolved {chunk.ref}")))

    # Step 6: Configured parser
    print("\n⚙️  Step 6: HTML Void Elements")
    print("-" * 30)

    parser = MarkupParser(ParserConfig.html())
    print(parser.round_trip('<form>\n  <input name="q" disabled>\n</form>'))


if __name__ == "__main__":
    quick_start_example()
