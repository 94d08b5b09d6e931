"""
UI state machine module.

Carousel paging, exclusive pane selection and one-shot threshold animations.
Each machine is independent of the chart pipeline and of the others.
"""
