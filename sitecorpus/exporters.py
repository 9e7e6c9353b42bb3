"""
Exporters
Write a CrawlResult to JSON, CSV or Word.
"""

import csv
import json
import logging
from pathlib import Path

from .crawler import CrawlResult

logger = logging.getLogger(__name__)

# Per-page cap in the Word export
DOCX_MAX_PAGE_CHARS = 15_000


def export_json(result: CrawlResult, filepath: str) -> str:
    """
    Export crawl results to JSON.

    Args:
        result: Crawl result to export
        filepath: Output file path

    Returns:
        Absolute path to the created file
    """
    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)

    logger.info(f"Exported JSON to {output_path.absolute()}")
    return str(output_path.absolute())


def export_csv(result: CrawlResult, filepath: str) -> str:
    """
    Export crawl results to CSV, one row per page.

    Args:
        result: Crawl result to export
        filepath: Output file path

    Returns:
        Absolute path to the created file
    """
    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = ['url', 'content_length', 'word_count', 'content']
    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for page in result.pages:
            writer.writerow({
                'url': page.url,
                'content_length': len(page.content),
                'word_count': len(page.content.split()),
                'content': page.content,
            })

    if not result.pages:
        logger.warning("No pages to export")
    logger.info(f"Exported CSV to {output_path.absolute()}")
    return str(output_path.absolute())


def export_docx(result: CrawlResult, filepath: str) -> str:
    """
    Export crawl results to a Word document.

    Args:
        result: Crawl result to export
        filepath: Output file path

    Returns:
        Absolute path to the created file
    """
    from docx import Document
    from docx.enum.text import WD_ALIGN_PARAGRAPH
    from docx.shared import Pt, RGBColor

    output_path = Path(filepath)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    doc = Document()

    # -- Styles ----------------------------------------------------------
    style = doc.styles['Normal']
    style.font.name = 'Calibri'
    style.font.size = Pt(10)

    # -- Cover / Summary -------------------------------------------------
    heading = doc.add_heading(result.title or 'Site Corpus', level=0)
    heading.alignment = WD_ALIGN_PARAGRAPH.CENTER

    summary_items = [
        f"Pages: {result.pages_count}",
        f"Corpus size: {len(result.content):,} characters",
        f"Failed pages: {result.stats.get('pages_failed', 0)}",
        f"Thin pages: {result.stats.get('pages_thin', 0)}",
        f"Elapsed time: {result.stats.get('elapsed_time', 0):.1f}s",
    ]
    for item in summary_items:
        p = doc.add_paragraph(item)
        p.paragraph_format.space_after = Pt(2)

    # -- Per-page content -------------------------------------------------
    for page in result.pages:
        doc.add_page_break()
        doc.add_heading(page.url, level=1)

        content = page.content
        if len(content) > DOCX_MAX_PAGE_CHARS:
            content = content[:DOCX_MAX_PAGE_CHARS] + '\n\n[... content truncated ...]'

        for block in content.split('\n\n'):
            if not block.strip():
                continue
            p = doc.add_paragraph(block)
            p.paragraph_format.space_after = Pt(4)
            for run in p.runs:
                run.font.size = Pt(9)
                if block.startswith('#'):
                    run.bold = True
                    run.font.color.rgb = RGBColor(0x1E, 0x29, 0x3B)

    doc.save(str(output_path))
    logger.info(f"Exported DOCX to {output_path.absolute()}")
    return str(output_path.absolute())
