"""Record, composite and encode in one call."""

import pytest

from democast.errors import ElementNotFound, ScenarioError
from democast.pipeline import record_demo
from democast.scenario import parse_scenario

SCENARIO = """
name: Pipeline demo
viewport: {width: 160, height: 100}
output: {width: 200, height: 120, fps: 5, format: gif, filename: demo}
effects:
  background: {padding: 10}
steps:
  - actions:
      - {action: navigate, url: "https://example.com"}
    captureDelay: 0
    holdDuration: 300
  - transition: fade
    actions:
      - {action: click, selector: "#cta"}
    captureDelay: 0
    holdDuration: 600
"""


def scenario_in(tmp_path, text=SCENARIO):
    scenario = parse_scenario(text)
    scenario.output.output_dir = str(tmp_path)
    return scenario


class TestRecordDemo:
    @pytest.mark.asyncio
    async def test_writes_gif(self, tmp_path, clock, provider):
        """A successful run writes the configured output file."""
        result = await record_demo(
            scenario_in(tmp_path),
            provider,
            builder_kwargs={"clock": clock, "sleep": clock.sleep},
        )
        assert result.output_path == tmp_path / "demo.gif"
        assert result.output_path.read_bytes().startswith(b"GIF")
        assert result.frame_count == len(result.session.frames)
        assert provider.closed

    @pytest.mark.asyncio
    async def test_without_effects(self, tmp_path, clock, provider):
        """Raw frames are still written at the output size."""
        scenario = scenario_in(tmp_path)
        scenario.output.format = "png-sequence"
        result = await record_demo(
            scenario,
            provider,
            effects=False,
            builder_kwargs={"clock": clock, "sleep": clock.sleep},
        )
        files = sorted(result.output_path.iterdir())
        assert len(files) == result.frame_count

    @pytest.mark.asyncio
    async def test_keep_partial(self, tmp_path, clock, provider):
        """With keep_partial the frames before a failure are still saved."""
        scenario = scenario_in(tmp_path, SCENARIO.replace("#cta", "#gone"))
        with pytest.raises(ElementNotFound):
            await record_demo(
                scenario,
                provider,
                keep_partial=True,
                builder_kwargs={"clock": clock, "sleep": clock.sleep},
            )
        assert (tmp_path / "demo.gif").exists()

    @pytest.mark.asyncio
    async def test_partial_discarded_by_default(self, tmp_path, clock, provider):
        """Without keep_partial nothing is written on failure."""
        scenario = scenario_in(tmp_path, SCENARIO.replace("#cta", "#gone"))
        with pytest.raises(ElementNotFound):
            await record_demo(
                scenario, provider, builder_kwargs={"clock": clock, "sleep": clock.sleep}
            )
        assert not (tmp_path / "demo.gif").exists()

    @pytest.mark.asyncio
    async def test_partial_save_failure(self, tmp_path, clock, provider, monkeypatch):
        """A failure while saving the partial output does not mask the capture error."""

        def broken_save(session, effects=None):
            raise OSError("disk full")

        monkeypatch.setattr("democast.pipeline.render_and_save", broken_save)
        scenario = scenario_in(tmp_path, SCENARIO.replace("#cta", "#gone"))
        with pytest.raises(ElementNotFound) as info:
            await record_demo(
                scenario,
                provider,
                keep_partial=True,
                builder_kwargs={"clock": clock, "sleep": clock.sleep},
            )
        assert info.value.selector == "#gone"
        assert provider.closed

    @pytest.mark.asyncio
    async def test_invalid_scenario_is_refused(self, tmp_path, clock, provider):
        """Logical errors are reported before any browser is launched."""
        no_navigate = SCENARIO.replace(
            '{action: navigate, url: "https://example.com"}', "{action: wait, duration: 10}"
        )
        scenario = scenario_in(tmp_path, no_navigate)
        with pytest.raises(ScenarioError) as info:
            await record_demo(
                scenario, provider, builder_kwargs={"clock": clock, "sleep": clock.sleep}
            )
        assert any("navigate" in issue for issue in info.value.issues)
        assert not provider.launched
        assert not (tmp_path / "demo.gif").exists()
