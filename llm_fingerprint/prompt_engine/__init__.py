"""Prompt generation: three customer-style questions per business.

  1. Industry detection (category → crawl facts → URL → default)
  2. Variable building (location context, industry wording, service context)
  3. Template selection per prompt type and substitution
"""
