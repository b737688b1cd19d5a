"""
Tests for 3D LUT sampling, serialization and the async exporter.
"""

import asyncio

import pytest

from gradelab.config import get_default_config
from gradelab.errors import GradeLabError, ValidationError
from gradelab.lut import (
    ExportState, LUTExporter, LUTExportOptions, LUTFormat, LUTSampler, format_number,
    generate_lut, save_lut, to_fixed
)
from gradelab.models import Adjustments, ColorGrading, HSLAdjustments, HSLColor, RGBOffset


@pytest.fixture
def cinematic():
    return ColorGrading(
        shadows=RGBOffset(-10, 5, 15),
        midtones=RGBOffset(0, 0, 0),
        highlights=RGBOffset(15, 5, -10),
    )


def split_lut(text, header_lines):
    lines = text.split("\n")
    assert lines[-1] == ""
    return lines[:header_lines], lines[header_lines:-1]


class TestNumberFormatting:
    """Test fixed-point and header number formatting."""

    def test_six_decimals(self):
        """Test ordinary values."""
        assert to_fixed(0) == "0.000000"
        assert to_fixed(1) == "1.000000"
        assert to_fixed(0.5) == "0.500000"
        assert to_fixed(0.05) == "0.050000"
        assert to_fixed(1 / 3) == "0.333333"

    def test_exact_ties_round_up(self):
        """Test exact binary ties round away from zero."""
        assert to_fixed(0.0078125) == "0.007813"
        assert to_fixed(-0.0078125) == "-0.007813"

    def test_negative_zero(self):
        """Test -0.0 prints without a sign."""
        assert to_fixed(-0.0) == "0.000000"

    def test_header_numbers(self):
        """Test shortest-form header numbers."""
        assert format_number(0.0) == "0"
        assert format_number(1.0) == "1"
        assert format_number(0.5) == "0.5"
        assert format_number(-0.25) == "-0.25"
        assert format_number(2) == "2"


class TestOptions:
    """Test export option parsing and validation."""

    def test_defaults(self):
        """Test default options."""
        options = LUTExportOptions()
        options.validate()
        assert options.lut_format is LUTFormat.CUBE
        assert options.resolution == 33
        assert options.domain.min == 0.0
        assert options.domain.max == 1.0

    def test_format_parsing(self):
        """Test format names are case-insensitive."""
        assert LUTFormat.parse("cube") is LUTFormat.CUBE
        assert LUTFormat.parse("3dl") is LUTFormat.THREE_DL
        assert LUTExportOptions(format="csp").format is LUTFormat.CSP
        assert LUTFormat.THREE_DL.extension == ".3dl"

    @pytest.mark.parametrize("resolution", [0, 16, 20, 64, 129, True])
    def test_unsupported_resolution(self, resolution):
        """Test only 17, 33 and 65 are accepted."""
        with pytest.raises(ValidationError):
            LUTExportOptions(resolution=resolution).validate()

    def test_unsupported_format(self):
        """Test unknown formats fail validation."""
        options = LUTExportOptions(format="PNG")
        with pytest.raises(ValidationError):
            options.validate()

    def test_invalid_domain(self):
        """Test an empty domain is rejected."""
        with pytest.raises(ValidationError):
            LUTExportOptions(domain={'min': 1.0, 'max': 0.0}).validate()

    def test_from_config(self):
        """Test options built from config with overrides."""
        options = LUTExportOptions.from_config(get_default_config(), {'resolution': 17, 'format': '3DL'})
        assert options.resolution == 17
        assert options.lut_format is LUTFormat.THREE_DL
        assert options.title == "GradeLab LUT"


class TestCubeFormat:
    """Test CUBE output."""

    def test_line_count(self):
        """Test a 17-point CUBE has 17^3 data lines after the header."""
        text = generate_lut(ColorGrading(), options=LUTExportOptions(resolution=17))
        header, data = split_lut(text, 5)
        assert header == [
            'TITLE "GradeLab LUT"',
            'DOMAIN_MIN 0 0 0',
            'DOMAIN_MAX 1 1 1',
            'LUT_3D_SIZE 17',
            '',
        ]
        assert len(data) == 4913

    def test_identity_grid(self):
        """Test zero adjustments reproduce the input grid with red varying fastest."""
        text = generate_lut(Adjustments(), options=LUTExportOptions(resolution=17))
        _, data = split_lut(text, 5)

        index = 0
        for b in range(17):
            for g in range(17):
                for r in range(17):
                    assert data[index] == f"{r / 16:.6f} {g / 16:.6f} {b / 16:.6f}"
                    index += 1

        assert data[1] == "0.062500 0.000000 0.000000"
        assert data[17] == "0.000000 0.062500 0.000000"
        assert data[-1] == "1.000000 1.000000 1.000000"

    def test_description_and_domain(self):
        """Test optional description and custom domain."""
        options = LUTExportOptions(resolution=17, title="Look", description="teal/orange",
                                   domain={'min': -0.5, 'max': 2})
        header, data = split_lut(generate_lut(ColorGrading(), options=options), 6)
        assert header == [
            'TITLE "Look"',
            '# teal/orange',
            'DOMAIN_MIN -0.5 -0.5 -0.5',
            'DOMAIN_MAX 2 2 2',
            'LUT_3D_SIZE 17',
            '',
        ]
        assert len(data) == 4913

    def test_grading_applied(self, cinematic):
        """Test tone-range offsets show up in the samples."""
        text = generate_lut(cinematic, options=LUTExportOptions(resolution=17))
        _, data = split_lut(text, 5)

        assert data[0] == "0.000000 0.050000 0.150000"
        assert data[-1] == "1.000000 1.000000 0.900000"

    def test_deterministic(self, cinematic):
        """Test repeated exports are byte-identical."""
        options = LUTExportOptions(resolution=33)
        assert generate_lut(cinematic, options=options) == generate_lut(cinematic, options=options)

    def test_hsl_only_with_option(self):
        """Test the HSL table is ignored unless apply_hsl is set."""
        adjustments = Adjustments(hsl=HSLAdjustments(red=HSLColor(saturation=-100)))

        plain = generate_lut(adjustments, options=LUTExportOptions(resolution=17))
        with_hsl = generate_lut(adjustments, options=LUTExportOptions(resolution=17, apply_hsl=True))

        assert split_lut(plain, 5)[1][16] == "1.000000 0.000000 0.000000"
        assert split_lut(with_hsl, 5)[1][16] == "0.500000 0.500000 0.500000"


class TestOtherFormats:
    """Test 3DL and CSP output."""

    def test_3dl(self):
        """Test 3DL header and float samples."""
        options = LUTExportOptions(format="3DL", resolution=17, description="night")
        header, data = split_lut(generate_lut(ColorGrading(), options=options), 4)

        assert header == ['# GradeLab LUT', '# night', '# LUT size: 17x17x17', '']
        assert len(data) == 4913
        assert data[1] == "0.062500 0.000000 0.000000"

    def test_csp(self):
        """Test CSP metadata block and 16-bit integer samples."""
        options = LUTExportOptions(format="CSP", resolution=17, description="night")
        header, data = split_lut(generate_lut(ColorGrading(), options=options), 9)

        assert header == [
            'CSPLUTV100',
            '3D',
            '',
            'BEGIN METADATA',
            'TITLE "GradeLab LUT"',
            'DESCRIPTION "night"',
            'END METADATA',
            '',
            '17 17 17',
        ]
        assert len(data) == 4913
        assert data[0] == "0 0 0"
        assert data[1] == "4096 0 0"
        assert data[-1] == "65535 65535 65535"

    def test_csp_without_description(self):
        """Test the DESCRIPTION line is omitted when empty."""
        text = generate_lut(ColorGrading(), options=LUTExportOptions(format="CSP", resolution=17))
        assert 'DESCRIPTION' not in text
        assert text.startswith('CSPLUTV100\n3D\n\nBEGIN METADATA\nTITLE "GradeLab LUT"\nEND METADATA\n\n17 17 17\n0 0 0\n')


class TestLUTSampler:
    """Test the chunked sampler."""

    def test_steps(self):
        """Test progress is reported per chunk until the grid is done."""
        sampler = LUTSampler(ColorGrading(), LUTExportOptions(resolution=17), chunk_size=1000)
        progress = list(sampler)

        assert [p.samples_done for p in progress] == [1000, 2000, 3000, 4000, 4913]
        assert progress[-1].percent == 100
        assert progress[-1].finished
        assert sampler.step() is None

    def test_result_requires_completion(self):
        """Test partial output is not returned."""
        sampler = LUTSampler(ColorGrading(), LUTExportOptions(resolution=17))
        sampler.step()
        with pytest.raises(GradeLabError):
            sampler.result()

    def test_validates_before_sampling(self):
        """Test bad options fail at construction."""
        with pytest.raises(ValidationError):
            LUTSampler(ColorGrading(), LUTExportOptions(resolution=18))

    def test_chunking_does_not_change_output(self, cinematic):
        """Test chunk size only affects progress granularity."""
        options = LUTExportOptions(resolution=17)
        small = LUTSampler(cinematic, options, chunk_size=7).run()
        large = LUTSampler(cinematic, options, chunk_size=100000).run()
        assert small == large


class TestLUTExporter:
    """Test the async exporter state machine."""

    @pytest.mark.asyncio
    async def test_export_states(self):
        """Test Idle -> Exporting -> Done -> Idle with progress updates."""
        exporter = LUTExporter()
        events = []
        exporter.add_listener(lambda state, progress: events.append((state, progress)))

        text = await exporter.export_lut(ColorGrading(), options=LUTExportOptions(resolution=17))

        assert len(text.split("\n")) == 5 + 4913 + 1
        states = [state for state, _ in events]
        assert states[0] is ExportState.EXPORTING
        assert states[-2:] == [ExportState.DONE, ExportState.IDLE]
        exporting = [p for s, p in events if s is ExportState.EXPORTING]
        assert exporting == sorted(exporting)
        assert exporting[-1] == 100

        assert exporter.state is ExportState.IDLE
        assert exporter.progress == 0
        assert not exporter.is_exporting
        assert exporter.error is None

    @pytest.mark.asyncio
    async def test_export_failure(self):
        """Test invalid options transition through Failed and re-raise."""
        exporter = LUTExporter()
        events = []
        exporter.add_listener(lambda state, progress: events.append(state))

        with pytest.raises(ValidationError):
            await exporter.export_lut(ColorGrading(), options=LUTExportOptions(resolution=20))

        assert events == [ExportState.EXPORTING, ExportState.FAILED, ExportState.IDLE]
        assert "resolution" in exporter.error
        assert exporter.state is ExportState.IDLE

    @pytest.mark.asyncio
    async def test_export_yields_to_event_loop(self):
        """Test other tasks run while the grid is sampled."""
        exporter = LUTExporter(progress_interval=1000)
        done = asyncio.Event()
        ticks = 0

        async def ticker():
            nonlocal ticks
            while not done.is_set():
                ticks += 1
                await asyncio.sleep(0)

        task = asyncio.ensure_future(ticker())
        await exporter.export_lut(ColorGrading(), options=LUTExportOptions(resolution=17))
        done.set()
        await task

        assert ticks >= 4

    @pytest.mark.asyncio
    async def test_matches_sync_output(self, cinematic):
        """Test async and sync generation agree."""
        options = LUTExportOptions(format="CSP", resolution=17)
        exporter = LUTExporter()
        assert await exporter.export_lut(cinematic, options=options) == generate_lut(cinematic, options=options)

    @pytest.mark.asyncio
    async def test_listener_errors_are_contained(self):
        """Test a failing listener does not break the export."""
        exporter = LUTExporter()

        def broken(state, progress):
            raise RuntimeError("listener failure")

        exporter.add_listener(broken)
        text = await exporter.export_lut(ColorGrading(), options=LUTExportOptions(resolution=17))
        assert text.startswith('TITLE')

        exporter.remove_listener(broken)
        assert exporter._listeners == []

    @pytest.mark.asyncio
    async def test_export_to_file(self, tmp_path, cinematic):
        """Test writing adds the format extension."""
        exporter = LUTExporter()
        options = LUTExportOptions(format="3DL", resolution=17)

        path = await exporter.export_to_file(tmp_path / "look", cinematic, options=options)

        assert path.name == "look.3dl"
        assert path.read_text() == generate_lut(cinematic, options=options)

    def test_save_lut_keeps_suffix(self, tmp_path):
        """Test an explicit suffix is preserved."""
        path = save_lut(tmp_path / "grade.txt", "x\n", LUTExportOptions())
        assert path.name == "grade.txt"
        assert path.read_text() == "x\n"

    def test_from_config(self):
        """Test exporter defaults come from the lut config section."""
        config = get_default_config()
        config['lut']['resolution'] = 65
        config['lut']['progress_interval'] = 500

        exporter = LUTExporter.from_config(config)
        assert exporter.default_options.resolution == 65
        assert exporter.progress_interval == 500
