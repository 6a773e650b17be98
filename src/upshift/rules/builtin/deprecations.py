"""Deprecated methods, constants and view helpers."""

import re

from upshift.rules.builtin.base import VIEW_FILES, detection, substitution

UPDATE_ATTRIBUTES = r"\.update_attributes[!(]"
SUCCESS_PREDICATE = r"\.success\?"
FIND_OR_INITIALIZE_BY = r"\.find_or_initialize_by_([a-zA-Z_]+)\b"
FIND_OR_CREATE_BY = r"\.find_or_create_by_([a-zA-Z_]+)\b"
PAGE_PARAM = r"\.page\(params\[:page\]\)"
PLUCK_INCLUDE = r"\.pluck\(:id\)\.include\?"
MIME_CONSTANTS = r"Mime::SET|Mime::Type"
PARAMS_PARSER = r"ActionDispatch::ParamsParser"
TEST_CASE_BEHAVIOR = r"ActionView::TestCase::Behavior"
HTTP_AUTHENTICATION = r"ActionController::HttpAuthentication::(Basic|Digest|Token)"
JSON_PARSE = r"JSON\.parse\([^,]+\)"
BACK_ARGUMENT = r"\b(url_for|link_to|redirect_to|form_for|form_tag)\b.*:back\b"
FORM_HELPERS = r"\bform_tag\b|\bform_for\b"
JS_HELPERS = r"\bbutton_to_function\b|\blink_to_function\b"

_ARGUMENT_SPLIT = re.compile(r"\s*,\s*")


def dynamic_finder(method: str):
  """Collapse ``.<method>_a_and_b(x, y)`` into ``.<method>(a: x, b: y)``.

  Calls whose argument count differs from the attribute count are left
  untouched for manual review.
  """

  def replace(match: re.Match[str]) -> str:
    attributes = match.group(1).split("_and_")
    arguments = match.group(2).strip()
    values = _ARGUMENT_SPLIT.split(arguments) if arguments else []
    if len(values) != len(attributes):
      return match.group(0)
    pairs = ", ".join(f"{attr}: {value}" for attr, value in zip(attributes, values))
    return f".{method}({pairs})"

  return replace


DETECTIONS = [
  detection(
    UPDATE_ATTRIBUTES,
    "Deprecated method 'update_attributes' - use 'update' instead",
  ),
  detection(
    SUCCESS_PREDICATE,
    "Deprecated method 'success?' - use 'successful?' instead",
  ),
  detection(
    FIND_OR_INITIALIZE_BY,
    "Deprecated finder method 'find_or_initialize_by_*' - "
    "use 'find_or_initialize_by(attribute: value)' instead",
  ),
  detection(
    FIND_OR_CREATE_BY,
    "Deprecated finder method 'find_or_create_by_*' - "
    "use 'find_or_create_by(attribute: value)' instead",
  ),
  detection(
    PAGE_PARAM,
    "Potential pagination issue - ensure proper escaping with "
    "'params.fetch(:page, 1)' for safety",
    version_constraint=">= 6.0.0",
  ),
  detection(
    PLUCK_INCLUDE,
    "Inefficient query pattern - consider using 'exists?' instead of "
    "'pluck(:id).include?'",
    version_constraint=">= 7.0.0",
  ),
  detection(
    MIME_CONSTANTS,
    "Deprecated constant 'Mime::SET/Mime::Type' - use 'Mime::LOOKUP' or "
    "'Mime.fetch' instead",
  ),
  detection(
    PARAMS_PARSER,
    "Deprecated constant 'ActionDispatch::ParamsParser' - this middleware was removed",
  ),
  detection(
    TEST_CASE_BEHAVIOR,
    "Deprecated constant 'ActionView::TestCase::Behavior' - use "
    "'ActionView::TestCase' directly",
    version_constraint=">= 6.0.0",
  ),
  detection(
    HTTP_AUTHENTICATION,
    "HTTP Authentication module usage may need updates",
  ),
  detection(
    JSON_PARSE,
    "Consider using 'JSON.parse(json, symbolize_names: true)' for safer parsing",
  ),
  detection(
    BACK_ARGUMENT,
    "Deprecated ':back' argument - use 'redirect_back' or 'link_back' instead",
    file_glob=VIEW_FILES,
  ),
  detection(
    FORM_HELPERS,
    "Deprecated form helpers - consider using 'form_with' instead",
    file_glob=VIEW_FILES,
  ),
  detection(
    JS_HELPERS,
    "Deprecated JavaScript helpers - use unobtrusive JavaScript instead",
    file_glob=VIEW_FILES,
    version_constraint=">= 6.0.0",
  ),
]

SUBSTITUTIONS = {
  UPDATE_ATTRIBUTES: substitution(r"\.update_attributes([!(])", r".update\1"),
  SUCCESS_PREDICATE: substitution(r"\.success\?", ".successful?"),
  FIND_OR_INITIALIZE_BY: substitution(
    r"\.find_or_initialize_by_([a-zA-Z_]+)\(([^()]*)\)",
    dynamic_finder("find_or_initialize_by"),
  ),
  FIND_OR_CREATE_BY: substitution(
    r"\.find_or_create_by_([a-zA-Z_]+)\(([^()]*)\)",
    dynamic_finder("find_or_create_by"),
  ),
  PLUCK_INCLUDE: substitution(
    r"\.pluck\(:id\)\.include\?\(([^()]+)\)",
    r".exists?(\1)",
  ),
}
