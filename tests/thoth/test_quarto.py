from __future__ import annotations

from pathlib import Path

import pytest
import yaml

import thoth.quarto as quarto
import thoth.scaffold as scaffold
from thoth.errors import ValidationFailedError


def test_create_quarto_template_writes_files(tmp_path: Path) -> None:
    target = quarto.create_quarto_template(
        "corporate", project_dir=tmp_path, primary_color="#1f77b4", theme="flatly"
    )

    assert target == tmp_path / "reports" / "templates" / "corporate"
    options = yaml.safe_load((target / "_template.yml").read_text(encoding="utf-8"))
    assert options["format"]["html"]["theme"] == "flatly"
    assert options["format"]["html"]["title-block-banner"] == "#1f77b4"
    assert options["mainfont"] == quarto.DEFAULT_FONT
    css = (target / "custom.css").read_text(encoding="utf-8")
    assert "--thoth-primary: #1f77b4;" in css
    assert "corporate" in css


def test_create_quarto_template_validates_inputs(tmp_path: Path) -> None:
    with pytest.raises(ValidationFailedError):
        quarto.create_quarto_template("../escape", project_dir=tmp_path)
    with pytest.raises(ValidationFailedError):
        quarto.create_quarto_template("brand", project_dir=tmp_path, primary_color="purple")
    assert not (tmp_path / "reports").exists()


def test_create_quarto_template_refuses_overwrite(tmp_path: Path) -> None:
    quarto.create_quarto_template("brand", project_dir=tmp_path)

    with pytest.raises(ValidationFailedError):
        quarto.create_quarto_template("brand", project_dir=tmp_path)

    quarto.create_quarto_template(
        "brand", project_dir=tmp_path, primary_color="#000", overwrite=True
    )
    css = quarto.template_dir(tmp_path, "brand") / "custom.css"
    assert "--thoth-primary: #000;" in css.read_text(encoding="utf-8")


def test_split_front_matter_without_header() -> None:
    assert quarto.split_front_matter("# Title\n") == ({}, "# Title\n")


def test_apply_template_to_report_merges_format(tmp_path: Path) -> None:
    report = scaffold.setup_quarto_template(tmp_path)
    quarto.create_quarto_template(
        "corporate", project_dir=tmp_path, primary_color="#1f77b4", theme="flatly"
    )

    quarto.apply_template_to_report(report, "corporate", project_dir=tmp_path)

    header, body = quarto.split_front_matter(report.read_text(encoding="utf-8"))
    html = header["format"]["html"]
    assert header["title"] == "Analysis Report"
    assert header["mainfont"] == quarto.DEFAULT_FONT
    assert html["theme"] == "flatly"
    assert html["code-fold"] is True
    assert html["toc-location"] == "left"
    assert html["css"] == "templates/corporate/custom.css"
    assert "```{python}" in body
    assert "## Conclusions" in body


def test_apply_template_to_report_without_front_matter(tmp_path: Path) -> None:
    report = tmp_path / "notes.qmd"
    report.write_text("Plain body\n", encoding="utf-8")
    quarto.create_quarto_template("brand", project_dir=tmp_path)

    quarto.apply_template_to_report(report, "brand", project_dir=tmp_path)

    header, body = quarto.split_front_matter(report.read_text(encoding="utf-8"))
    assert header["format"]["html"]["css"] == "reports/templates/brand/custom.css"
    assert body == "Plain body\n"


def test_apply_template_requires_existing_template(tmp_path: Path) -> None:
    report = tmp_path / "report.qmd"
    report.write_text("body\n", encoding="utf-8")

    with pytest.raises(ValidationFailedError) as excinfo:
        quarto.apply_template_to_report(report, "missing", project_dir=tmp_path)
    assert "template not found" in str(excinfo.value)

    with pytest.raises(ValidationFailedError):
        quarto.apply_template_to_report(tmp_path / "nope.qmd", "missing", project_dir=tmp_path)


def test_split_front_matter_empty_header() -> None:
    assert quarto.split_front_matter("---\n---\nBody\n") == ({}, "Body\n")


def test_split_front_matter_rejects_malformed_yaml() -> None:
    with pytest.raises(ValidationFailedError) as excinfo:
        quarto.split_front_matter("---\ntitle: [unclosed\n---\nBody\n")
    assert "report front matter is not valid YAML" in str(excinfo.value)


def test_apply_template_to_report_with_empty_header(tmp_path: Path) -> None:
    report = tmp_path / "blank.qmd"
    report.write_text("---\n---\nBody\n", encoding="utf-8")
    quarto.create_quarto_template("brand", project_dir=tmp_path)

    quarto.apply_template_to_report(report, "brand", project_dir=tmp_path)

    text = report.read_text(encoding="utf-8")
    assert text.count("---\n") == 2
    header, body = quarto.split_front_matter(text)
    assert header["format"]["html"]["css"] == "reports/templates/brand/custom.css"
    assert body == "Body\n"


def test_apply_template_rejects_malformed_template_options(tmp_path: Path) -> None:
    report = tmp_path / "report.qmd"
    report.write_text("body\n", encoding="utf-8")
    target = quarto.create_quarto_template("brand", project_dir=tmp_path)
    (target / "_template.yml").write_text("format: {html: [\n", encoding="utf-8")

    with pytest.raises(ValidationFailedError) as excinfo:
        quarto.apply_template_to_report(report, "brand", project_dir=tmp_path)

    assert "template brand options is not valid YAML" in str(excinfo.value)
    assert report.read_text(encoding="utf-8") == "body\n"
