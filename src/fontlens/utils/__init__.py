# -*- coding: utf-8 -*-
"""
The Utilities Package for FontLens.

- `text_utils`: OCR text cleanup, confirmed-text normalization and
  confidence levels.
- `region_capture`: loading the analysed region from a file or the screen.
"""
