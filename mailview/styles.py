"""Stylesheet for transformed email content.

The transformer only adds ``mv-*`` class names; how they look is decided
here, once, and handed to the rendering layer. Bump STYLESHEET_VERSION
whenever a rule changes so cached copies are refreshed.
"""

STYLESHEET_VERSION = "1"

CONTAINER_CLASS = "email-content-display"

STYLESHEET = """\
.email-content-display {
  line-height: 1.625;
  white-space: pre-wrap;
  word-break: break-word;
  color: #1f2937;
}
.email-content-display .mv-empty { color: #6b7280; font-style: italic; }
.email-content-display .mv-paragraph { margin: 0.75rem 0; line-height: 1.625; }
.email-content-display .mv-link { color: #2563eb; word-break: break-all; }
.email-content-display .mv-link:hover { text-decoration: underline; }
.email-content-display .mv-pre {
  background: #f3f4f6; padding: 0.75rem; border-radius: 0.5rem;
  overflow-x: auto; font-family: monospace; font-size: 0.875rem; white-space: pre;
}
.email-content-display .mv-code {
  background: #f3f4f6; padding: 0.25rem 0.5rem; border-radius: 0.25rem;
  font-family: monospace; font-size: 0.875rem;
}
.email-content-display .mv-blockquote {
  border-left: 4px solid #d1d5db; padding-left: 1rem; margin: 1rem 0;
  color: #374151; font-style: italic;
}
.email-content-display .mv-list { margin: 1rem 0; list-style-position: inside; }
.email-content-display .mv-list-disc { list-style-type: disc; }
.email-content-display .mv-list-decimal { list-style-type: decimal; }
.email-content-display .mv-list-item { margin-left: 1rem; }
.email-content-display .mv-table-wrap { overflow-x: auto; margin: 1rem 0; }
.email-content-display .mv-table { min-width: 100%; border: 1px solid #e5e7eb; }
.email-content-display .mv-cell { padding: 0.5rem 1rem; border-bottom: 1px solid #e5e7eb; }
.email-content-display .mv-cell-head { background: #f3f4f6; text-align: left; font-weight: 600; }
.email-content-display .mv-image-wrap { display: inline-block; max-width: 100%; margin: 1rem 0; }
.email-content-display .mv-image { box-shadow: 0 1px 2px rgba(0, 0, 0, 0.05); border: 1px solid #e5e7eb; }
.email-content-display .mv-embed {
  margin: 1rem 0; border: 1px solid #e5e7eb; border-radius: 0.5rem; overflow: hidden;
}
.email-content-display .mv-embed-video { aspect-ratio: 16 / 9; }
.email-content-display .mv-placeholder {
  display: flex; align-items: center; gap: 0.75rem; padding: 1rem; margin: 1rem 0;
  border: 2px dashed #d1d5db; border-radius: 0.5rem; background: #f9fafb; white-space: normal;
}
.email-content-display .mv-placeholder-image { min-height: 120px; }
.email-content-display .mv-placeholder-embed {
  min-height: 200px; background: #eff6ff; border-color: #93c5fd;
}
.email-content-display .mv-placeholder-untrusted { background: #fefce8; border-color: #fde047; }
.email-content-display .mv-placeholder-icon { flex-shrink: 0; padding: 0.75rem; border-radius: 0.5rem; }
.email-content-display .mv-placeholder-title { font-size: 0.875rem; font-weight: 500; }
.email-content-display .mv-placeholder-detail { font-size: 0.75rem; color: #6b7280; margin-top: 0.25rem; }
.email-content-display .mv-icon { width: 2rem; height: 2rem; color: #9ca3af; }
.email-content-display .mv-icon-small { width: 1rem; height: 1rem; }
.email-content-display .mv-reveal,
.email-content-display .mv-open-link {
  display: block; margin-top: 0.5rem; font-size: 0.75rem; color: #2563eb;
  text-decoration: underline; background: none; border: 0; padding: 0; cursor: pointer;
}
.email-content-display .mv-tracking-notice {
  display: inline-flex; align-items: center; gap: 0.5rem; padding: 0.5rem 0.75rem; margin: 0.5rem 0;
  font-size: 0.875rem; color: #6b7280; background: #f3f4f6;
  border: 1px solid #e5e7eb; border-radius: 0.5rem;
}
"""
