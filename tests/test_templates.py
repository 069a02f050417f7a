"""
Tests for template rendering and packaged assets.
"""

import pytest

from kcp.util.templates import ASSETS_DIR, TemplateLoader, copy_asset, read_asset


class TestTemplateLoader:
    """Tests for the Jinja2 template loader."""

    def test_render_custom_template(self, tmp_path):
        (tmp_path / "hello.j2").write_text("Hello {{ name }}")
        loader = TemplateLoader(tmp_path)
        assert loader.render("hello.j2", {"name": "kcp"}) == "Hello kcp"

    def test_hcl_string_filter(self, tmp_path):
        (tmp_path / "value.j2").write_text('"{{ value | hcl_string }}"')
        loader = TemplateLoader(tmp_path)
        rendered = loader.render("value.j2", {"value": 'say "hi" to ${user}\\'})
        assert rendered == '"say \\"hi\\" to $${user}\\\\"'

    def test_b64encode_filter(self, tmp_path):
        (tmp_path / "token.j2").write_text("{{ value | b64encode }}")
        loader = TemplateLoader(tmp_path)
        assert loader.render("token.j2", {"value": "key:secret"}) == "a2V5OnNlY3JldA=="

    def test_render_template_writes_file(self, tmp_path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "script.sh.j2").write_text("echo {{ msg }}\n")
        loader = TemplateLoader(templates)

        path = loader.render_template(
            "script.sh.j2", {"msg": "hi"}, tmp_path / "out" / "script.sh", mode=0o755
        )

        assert path.read_text() == "echo hi\n"
        assert path.stat().st_mode & 0o777 == 0o755

    def test_missing_template_dir(self, tmp_path):
        loader = TemplateLoader(tmp_path / "missing")
        with pytest.raises(FileNotFoundError):
            loader.render("x.j2", {})

    def test_packaged_templates_load(self):
        loader = TemplateLoader()
        for name in (
            "migrate_topics/direct/README.md.j2",
            "migrate_topics/jump_cluster/cp-to-cc-mirror-topics.sh.j2",
            "migrate_schemas/README.md.j2",
            "migrate_connectors/connector.tf.j2",
            "connector_utility/README.md.j2",
            "convert/migrated-acls-report.md.j2",
        ):
            assert loader.load_template(name) is not None


class TestAssets:
    """Tests for static assets."""

    def test_read_asset(self):
        assert read_asset("generate_dns_entries.sh").startswith("#!/bin/bash")

    def test_missing_asset(self):
        with pytest.raises(FileNotFoundError):
            read_asset("missing.tpl")

    def test_copy_asset(self, tmp_path):
        path = copy_asset("generate_dns_entries.sh", tmp_path / "dns.sh", mode=0o755)
        assert path.read_text() == (ASSETS_DIR / "generate_dns_entries.sh").read_text()
        assert path.stat().st_mode & 0o777 == 0o755

    def test_cluster_link_user_data_variables(self):
        # templatefile fails on variables it is not given
        links = read_asset("jump-cluster-with-sasl-scram-cluster-links-user-data.tpl")
        assert "${msk_sasl_scram_username}" in links
        iam_links = read_asset("jump-cluster-with-iam-cluster-links-user-data.tpl")
        assert "msk_sasl_scram_username" not in iam_links
        assert "AWS_MSK_IAM" in iam_links
