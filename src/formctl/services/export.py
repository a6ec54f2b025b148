"""ExportService: render the current form as JSON or typed-schema source."""

from __future__ import annotations

from pathlib import Path

from formctl.domain.types import ExportFormat
from formctl.services.base import BaseService
from formctl.services.generator import GeneratorOptions, generate
from formctl.services.result import ErrorCode, ServiceResult, failure


class ExportService(BaseService):
    """Code and data export for the current form."""

    def _options(self) -> GeneratorOptions:
        cfg = self._workspace.settings.generator
        return GeneratorOptions(library=cfg.library, message_language=cfg.message_language)

    def export(
        self, fmt: ExportFormat, *, full: bool = False, output: Path | None = None
    ) -> ServiceResult:
        """Generate *fmt* text; ``full`` exports the complete definition (ids included).

        With *output*, the text is written to that file instead of returned.
        """
        op = f"export_{fmt.value}"
        form = self._store.form
        if full and fmt is ExportFormat.JSON:
            content = self._store.export_to_json()
        else:
            content = generate(form, fmt, self._options())

        warnings: list[str] = []
        data: dict[str, object] = {"form_id": form.id, "format": fmt.value}
        if output is not None:
            try:
                output.parent.mkdir(parents=True, exist_ok=True)
                output.write_text(content, encoding="utf-8")
            except OSError as exc:
                return failure(op, ErrorCode.INVALID_INPUT, f"Cannot write {output}: {exc}")
            data["path"] = str(output)
        else:
            data["content"] = content

        self._dispatch_event("post_export", {"form_id": form.id, "fmt": fmt.value}, warnings)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)
