"""End-to-end tests for the GDP and longevity pipeline.

These tests run the pipeline through real CSV files:
- Wide tables -> cleaned panel
- Cleaned panel -> aggregates, fit and cross-validation
- The command-line entry point
"""

import logging

import pandas as pd
import pytest

from gdp_longevity.analysis import export_results, run_analysis
from gdp_longevity.config import PipelineConfig
from gdp_longevity.exceptions import DuplicateKey, InsufficientData, MalformedHeader
from gdp_longevity.logging_config import set_log_level
from gdp_longevity.main import main
from gdp_longevity.preprocess import PANEL_COLUMNS, DataProcessor, build_clean_panel


# ============================================================================
# Cleaning Pipeline Tests
# ============================================================================

@pytest.mark.integration
class TestCleanPanel:
    """Test the reshape -> normalize -> merge -> filter pipeline."""

    def test_afghanistan_example(self, life_wide, gdp_wide):
        clean_df, _ = build_clean_panel(life_wide, gdp_wide, PipelineConfig(historical_cutoff=None))

        afghanistan = clean_df[clean_df["country"] == "Afghanistan"]
        first = afghanistan[afghanistan["year"] == 1800].iloc[0]
        assert first["life_expectancy"] == 28.2
        assert first["gdp_per_capita"] == 2000.0
        # "85k" is not a valid life expectancy and is absorbed as missing
        assert 2100 not in afghanistan["year"].tolist()

    def test_cutoff_drops_projections(self, life_wide, gdp_wide):
        clean_df, report = build_clean_panel(life_wide, gdp_wide, PipelineConfig())

        assert clean_df["year"].max() <= 2024
        assert report.dropped_projected == 1  # Albania 2100

    def test_malformed_cells_never_abort(self, wide_tables_factory):
        tables = wide_tables_factory(n_countries=12, years=range(2000, 2005))
        tables["life"].loc[:, "2001"] = "garbage"
        tables["gdp"].loc[:, "2002"] = ""

        clean_df, report = build_clean_panel(tables["life"], tables["gdp"])

        assert set(clean_df["year"]) <= {2000, 2003, 2004}
        assert report.dropped_missing >= 24

    def test_malformed_header_aborts(self, life_wide, gdp_wide):
        bad = life_wide.rename(columns={"1801": "1801 (est.)"})

        with pytest.raises(MalformedHeader):
            build_clean_panel(bad, gdp_wide)

    def test_duplicate_country_aborts(self, life_wide, gdp_wide):
        doubled = pd.concat([gdp_wide, gdp_wide.iloc[[0]]], ignore_index=True)

        with pytest.raises(DuplicateKey):
            build_clean_panel(life_wide, doubled)


@pytest.mark.integration
class TestDataProcessor:
    """Test DataProcessor reading and writing files."""

    def test_writes_cleaned_panel(self, wide_csv_files):
        processor = DataProcessor(
            PipelineConfig(),
            wide_csv_files["life"],
            wide_csv_files["gdp"],
            wide_csv_files["output_dir"],
        )

        clean_df = processor.run_all_processing()

        written = pd.read_csv(processor.paths.cleaned_panel)
        assert list(written.columns) == PANEL_COLUMNS
        assert len(written) == len(clean_df)
        assert written["year"].max() <= 2024
        assert written["life_expectancy"].between(0, 120).all()
        assert processor.filter_report.output_rows == len(clean_df)

    def test_absorbed_cells_are_missing_from_output(self, wide_csv_files):
        processor = DataProcessor(
            PipelineConfig(),
            wide_csv_files["life"],
            wide_csv_files["gdp"],
            wide_csv_files["output_dir"],
        )

        clean_df = processor.run_all_processing()
        keys = set(zip(clean_df["country"], clean_df["year"]))

        assert ("Country 00", 2000) not in keys  # blank life expectancy
        assert ("Country 01", 2001) not in keys  # "n/a"
        assert ("Country 02", 2002) not in keys  # 250 years
        assert ("Country 03", 2003) not in keys  # upper-case "K"
        assert ("Country 04", 2004) in keys


# ============================================================================
# Analysis Tests
# ============================================================================

@pytest.mark.integration
class TestAnalysis:
    """Test aggregation, fitting and cross-validation on a cleaned panel."""

    @pytest.fixture
    def clean_df(self, wide_tables_factory):
        tables = wide_tables_factory(n_countries=30)
        clean_df, _ = build_clean_panel(tables["life"], tables["gdp"])
        return clean_df

    def test_run_analysis(self, clean_df):
        results = run_analysis(clean_df, PipelineConfig(seed=11))

        assert len(results["aggregates"]) == 30
        assert results["cv"].k == 3
        assert results["fit"].slope > 0
        assert results["aggregates"]["fold"].notna().all()

    def test_repeated_runs_are_identical(self, clean_df):
        first = run_analysis(clean_df, PipelineConfig(seed=11))
        second = run_analysis(clean_df, PipelineConfig(seed=11))

        pd.testing.assert_series_equal(first["folds"], second["folds"])
        pd.testing.assert_frame_equal(first["cv"].scores, second["cv"].scores)

    def test_export_results(self, clean_df, tmp_path):
        results = run_analysis(clean_df, PipelineConfig())

        paths = export_results(results, tmp_path)

        assert len(pd.read_csv(paths.cv_scores)) == results["cv"].k
        summary = pd.read_csv(paths.regression_summary)
        assert summary.loc[0, "n_countries"] == 30
        assert summary.loc[0, "mean_score"] == pytest.approx(results["cv"].mean_score)

    @pytest.mark.parametrize("countries", [[], ["Afghanistan"]])
    def test_too_few_countries_for_ols_raises_insufficient_data(self, countries):
        clean_df = pd.DataFrame({
            "country": [c for c in countries for _ in range(2)],
            "year": [y for _ in countries for y in (2000, 2001)],
            "life_expectancy": [55.1, 55.6] * len(countries),
            "gdp_per_capita": [1200.0, 1300.0] * len(countries),
        }, columns=PANEL_COLUMNS)

        with pytest.raises(InsufficientData) as exc_info:
            run_analysis(clean_df, PipelineConfig())

        assert exc_info.value.n_countries == len(countries)


# ============================================================================
# Command-Line Tests
# ============================================================================

@pytest.mark.integration
class TestMain:
    """Test the command-line entry point."""

    def test_full_run(self, wide_csv_files):
        output_dir = wide_csv_files["output_dir"]

        exit_code = main([
            "--life", str(wide_csv_files["life"]),
            "--gdp", str(wide_csv_files["gdp"]),
            "--output_dir", str(output_dir),
        ])

        assert exit_code == 0
        for name in ["cleaned_panel.csv", "country_aggregates.csv", "cv_scores.csv", "regression_summary.csv"]:
            assert (output_dir / name).exists()

    def test_clean_only(self, wide_csv_files):
        output_dir = wide_csv_files["output_dir"]

        exit_code = main([
            "--life", str(wide_csv_files["life"]),
            "--gdp", str(wide_csv_files["gdp"]),
            "--output_dir", str(output_dir),
            "--include_projections",
            "--clean_only",
        ])

        assert exit_code == 0
        written = pd.read_csv(output_dir / "cleaned_panel.csv")
        assert written["year"].max() == 2029
        assert not (output_dir / "cv_scores.csv").exists()

    def test_too_few_countries_exits_non_zero(self, wide_csv_files):
        exit_code = main([
            "--life", str(wide_csv_files["life"]),
            "--gdp", str(wide_csv_files["gdp"]),
            "--output_dir", str(wide_csv_files["output_dir"]),
            "--min_fold_size", "40",
        ])

        assert exit_code == 1

    def test_plot(self, wide_csv_files, tmp_path):
        pytest.importorskip("matplotlib")
        figures_dir = tmp_path / "figures"

        exit_code = main([
            "--life", str(wide_csv_files["life"]),
            "--gdp", str(wide_csv_files["gdp"]),
            "--output_dir", str(wide_csv_files["output_dir"]),
            "--figures_dir", str(figures_dir),
            "--plot",
        ])

        assert exit_code == 0
        assert (figures_dir / "life_expectancy_vs_log_gdp.pdf").exists()
        assert (figures_dir / "cv_scores.pdf").exists()

    def test_single_country_exits_non_zero(self, tmp_path):
        life_path = tmp_path / "life.csv"
        gdp_path = tmp_path / "gdp.csv"
        life_path.write_text("country,2000,2001\nAfghanistan,55.1,55.6\n")
        gdp_path.write_text("country,2000,2001\nAfghanistan,1.2k,1.3k\n")

        exit_code = main([
            "--life", str(life_path),
            "--gdp", str(gdp_path),
            "--output_dir", str(tmp_path / "output"),
        ])

        assert exit_code == 1
        assert (tmp_path / "output" / "cleaned_panel.csv").exists()
        assert not (tmp_path / "output" / "cv_scores.csv").exists()

    def test_all_projected_years_exits_non_zero(self, wide_tables_factory, tmp_path):
        tables = wide_tables_factory(n_countries=30, years=range(2050, 2055))
        life_path = tmp_path / "life.csv"
        gdp_path = tmp_path / "gdp.csv"
        tables["life"].to_csv(life_path, index=False)
        tables["gdp"].to_csv(gdp_path, index=False)

        exit_code = main([
            "--life", str(life_path),
            "--gdp", str(gdp_path),
            "--output_dir", str(tmp_path / "output"),
        ])

        assert exit_code == 1
        written = pd.read_csv(tmp_path / "output" / "cleaned_panel.csv")
        assert written.empty

    def test_log_level_reaches_plot_logger(self, wide_csv_files, tmp_path):
        pytest.importorskip("matplotlib")

        try:
            exit_code = main([
                "--life", str(wide_csv_files["life"]),
                "--gdp", str(wide_csv_files["gdp"]),
                "--output_dir", str(wide_csv_files["output_dir"]),
                "--figures_dir", str(tmp_path / "figures"),
                "--plot",
                "--log_level", "WARNING",
            ])

            assert exit_code == 0
            plot_logger = logging.getLogger("gdp_longevity.plot")
            assert plot_logger.getEffectiveLevel() == logging.WARNING
            assert not plot_logger.isEnabledFor(logging.INFO)
        finally:
            set_log_level("INFO")
