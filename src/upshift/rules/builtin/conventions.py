"""Time zone, URL encoding and collection conventions."""

import re

from upshift.rules.builtin.base import detection, substitution

TIME_NOW = r"\bTime\.now\b"
DATETIME_NOW = r"\bDateTime\.now\b"
DATE_TODAY = r"\bDate\.today\b"
URI_ESCAPE = r"URI\.escape|URI\.unescape"
CGI_ESCAPE = r"CGI\.escape\((?![^()]*\.to_s\))[^()]+\)"
COLLECTION_PRESENCE = r"\.present\?\s*$"
MERGE_KEYWORDS = r"\.merge\([^)]+\)\)(?!\s*\*\*)"
MAILER_ARGUMENTS = r"def\s+\w+\(([^)]{40,})\)"


def cgi_escape(match: re.Match[str]) -> str:
  """Swap URI.(un)escape for CGI.(un)escape with a string argument."""
  prefix = match.group(1) or ""
  argument = match.group(2).strip()
  if not argument.endswith(".to_s"):
    argument += ".to_s"
  return f"CGI.{prefix}escape({argument})"


def collection_presence(match: re.Match[str], content: str) -> str:
  """Ignore blank members when checking a collection's presence.

  Only variables used like a collection elsewhere in the file
  (appended to, iterated or indexed) are rewritten.
  """
  name = match.group(1)
  word = re.escape(name)
  used_as_collection = re.search(
    rf"\b{word}\s*<<|\b{word}\.each\b|\b{word}\.map\b|\b{word}\[",
    content,
  )
  if not used_as_collection:
    return match.group(0)
  return f"{name}.reject(&:blank?).present?"


DETECTIONS = [
  detection(
    TIME_NOW,
    "Use Time.current instead of Time.now for proper timezone handling",
  ),
  detection(
    DATETIME_NOW,
    "Use Time.current instead of DateTime.now for proper timezone handling",
  ),
  detection(
    DATE_TODAY,
    "Consider using Time.current.to_date instead of Date.today for timezone consistency",
  ),
  detection(
    URI_ESCAPE,
    "Deprecated URI.escape/unescape - use CGI.escape/unescape instead",
  ),
  detection(
    CGI_ESCAPE,
    "Ensure CGI.escape includes .to_s to handle non-string inputs safely",
  ),
  detection(
    COLLECTION_PRESENCE,
    "Collection presence check might need .reject(&:blank?).present? "
    "for meaningful content validation",
  ),
  detection(
    MERGE_KEYWORDS,
    "Consider using double splat operator (**) when merging hashes for keyword arguments",
  ),
  detection(
    MAILER_ARGUMENTS,
    "Consider using params hash pattern for mailer methods with multiple parameters",
    file_glob="app/mailers/**/*.rb",
  ),
]

SUBSTITUTIONS = {
  TIME_NOW: substitution(TIME_NOW, "Time.current"),
  DATETIME_NOW: substitution(DATETIME_NOW, "Time.current"),
  DATE_TODAY: substitution(DATE_TODAY, "Time.current.to_date"),
  URI_ESCAPE: substitution(r"URI\.(un)?escape\(([^()]+)\)", cgi_escape),
  CGI_ESCAPE: substitution(
    r"CGI\.escape\((?![^()]*\.to_s\))([^()]+)\)",
    r"CGI.escape(\1.to_s)",
  ),
  COLLECTION_PRESENCE: substitution(
    r"(\w+)\.present\?[ \t]*$",
    collection_presence,
    needs_content=True,
  ),
}
