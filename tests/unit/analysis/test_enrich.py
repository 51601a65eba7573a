"""Unit tests for EnrichmentReporter."""

import asyncio

from conftest import FakeBrew, output

from brewtrack.analysis.enrich import (
    NEW_CASKS,
    NEW_FORMULAE,
    OUTDATED_CASKS,
    OUTDATED_FORMULAE,
    SECTIONS,
    EnrichmentReporter,
)
from brewtrack.core.models import DEFAULT_DESCRIPTION, DEFAULT_HOMEPAGE
from brewtrack.providers.metadata import MetadataLookup


def reporter(brew, console, run_log, concurrency=4) -> EnrichmentReporter:
    return EnrichmentReporter(MetadataLookup(brew), console, run_log, concurrency=concurrency)


class TestEnrichmentReporter:
    """Tests for rendering report sections."""

    def test_sections_in_fixed_order(self) -> None:
        """Outdated formulae, outdated casks, new formulae, new casks."""
        assert SECTIONS == (OUTDATED_FORMULAE, OUTDATED_CASKS, NEW_FORMULAE, NEW_CASKS)

    def test_empty_section_single_line_no_lookups(self, console, run_log) -> None:
        """No names means one status line and zero lookups."""
        brew = FakeBrew()
        records = asyncio.run(reporter(brew, console, run_log).render(OUTDATED_FORMULAE, []))

        assert records == []
        assert brew.metadata_calls == []
        assert output(console) == "  No formula updates available.\n"

    def test_blocks_rendered(self, console, run_log, fake_brew) -> None:
        """Each package gets a name, homepage and description line."""
        records = asyncio.run(
            reporter(fake_brew, console, run_log).render(NEW_FORMULAE, ["c"])
        )

        assert [r.name for r in records] == ["c"]
        assert output(console) == (
            "\n🆕 New Formulae:\n"
            "  - c:\n"
            "      Homepage: https://c.example.org\n"
            "      Description: Formula c\n"
        )

    def test_input_order_preserved(self, console, run_log) -> None:
        """Records follow the input order even with parallel lookups."""
        names = [f"pkg{i:02d}" for i in range(20)]
        brew = FakeBrew(metadata={n: (f"https://{n}", n) for n in names})
        records = asyncio.run(
            reporter(brew, console, run_log, concurrency=3).render(OUTDATED_CASKS, names)
        )

        assert [r.name for r in records] == names
        rendered = [line for line in output(console).splitlines() if line.startswith("  - ")]
        assert rendered == [f"  - {n}:" for n in names]

    def test_failed_lookup_isolated_and_logged(self, console, run_log, fake_brew) -> None:
        """One failing lookup gets defaults; the others are unaffected."""
        fake_brew.failures = {"info:x"}
        records = asyncio.run(
            reporter(fake_brew, console, run_log).render(OUTDATED_FORMULAE, ["a", "x", "c"])
        )

        by_name = {r.name: r for r in records}
        assert by_name["x"].homepage == DEFAULT_HOMEPAGE
        assert by_name["x"].description == DEFAULT_DESCRIPTION
        assert by_name["a"].homepage == "https://a.example.org"
        assert by_name["c"].description == "Formula c"

        assert run_log.count == 1
        assert run_log.entries[0].step == "metadata"
        assert "'x'" in run_log.entries[0].message

    def test_markup_in_metadata_is_escaped(self, console, run_log) -> None:
        """Descriptions containing Rich markup are printed verbatim."""
        brew = FakeBrew(metadata={"m": ("https://m", "Tool for [bold]markup[/bold] :smile:")})
        asyncio.run(reporter(brew, console, run_log).render(NEW_CASKS, ["m"]))
        assert "Description: Tool for [bold]markup[/bold] :smile:" in output(console)
