"""Visibility analytics.

Pure functions over in-memory check records:
  - scoring:          four score inputs and the composite AI Visibility Score
  - trends:           current vs previous 7-day window, weekly series
  - gaps:             queries where competitors appear and the brand does not
  - recommendations:  assembly of gaps, platform failures and trends, ranking
  - sentiment:        brand sentiment summaries
"""
