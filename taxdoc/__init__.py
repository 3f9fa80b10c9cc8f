"""Tax document OCR system.

Screens uploaded photos of tax documents for blur, recognises their text
across the four cardinal orientations with Tesseract, and extracts W-2 and
ADP earnings statement fields with per-document regex patterns.
"""
