from html import unescape as html_unescape

from django import template
from django.template.defaultfilters import stringfilter

register = template.Library()


@register.filter
@stringfilter
def unescape(value):
    """
    Undoes the escaping applied when a form was validated, so autoescape
    writes the text out exactly once and resubmitting a form is lossless.
    """
    return html_unescape(value)
