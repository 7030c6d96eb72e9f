"""Tests for source fragments and the generators that write them."""

from __future__ import annotations

from pathlib import Path

from unikit.core import load_app_config
from unikit.core.models import (
    Dependencies,
    DhcpNetwork,
    FilesystemConfig,
    FilesystemMount,
    HttpListener,
    HttpMain,
    IpMain,
    StaticNetwork,
)
from unikit.synth import SourceSynthesizer, render_main, render_manifest
from unikit.synth.fragments import (
    ocaml_string,
    render_entry_point,
    render_filesystem,
    render_http,
    render_network,
)


class TestFragments:
    def test_filesystem_opens(self) -> None:
        fs = FilesystemConfig(
            mounts=(
                FilesystemMount(name="static", source_path=Path("/x")),
                FilesystemMount(name="tmpl", source_path=Path("/y")),
            )
        )
        assert render_filesystem(fs) == "open Filesystem_static\nopen Filesystem_tmpl\n\n"

    def test_dhcp_network(self) -> None:
        assert render_network(DhcpNetwork()).startswith("let ip = `DHCP\n")

    def test_static_network(self) -> None:
        text = render_network(StaticNetwork(address="192.168.0.5"))
        assert 'ipv4_addr_of_string "192.168.0.5"' in text
        assert 'ipv4_addr_of_string "255.255.255.0"' in text
        assert '[get (Net.Nettypes.ipv4_addr_of_string "10.0.0.1")]' in text

    def test_http_absent(self) -> None:
        assert render_http(None) == ""

    def test_http_bind_all(self) -> None:
        text = render_http(HttpListener(port=8080))
        assert "let listen_port = 8080\n" in text
        assert "let listen_address = None\n" in text

    def test_http_bound_address(self) -> None:
        text = render_http(HttpListener(port=80, bind_address="10.0.0.2"))
        assert 'let listen_address = Net.Nettypes.ipv4_addr_of_string "10.0.0.2"' in text

    def test_ip_entry_point(self) -> None:
        text = render_entry_point(IpMain(symbol="Start"))
        assert "    Start mgr interface id\n" in text
        assert "Net.Manager.configure interface ip" in text
        assert text.endswith("let () = OS.Main.run (main ())\n")

    def test_http_entry_point_references_listener(self) -> None:
        text = render_entry_point(HttpMain(symbol="Dispatch.main"))
        assert "callback    = Dispatch.main;" in text
        assert "(listen_address, listen_port)" in text
        assert text.endswith("let () = OS.Main.run (main ())\n")

    def test_ocaml_string_escapes(self) -> None:
        assert ocaml_string('a"b\\c') == '"a\\"b\\\\c"'


class TestManifest:
    def test_default_dependency_only(self) -> None:
        text = render_manifest("app", Dependencies())
        assert text == (
            "obuild-ver: 1\n"
            "name: app\n"
            "version: 0.0.0\n"
            "\n"
            "executable app\n"
            "  main: main.ml\n"
            "  buildDepends: mirage\n"
            "  pp: camlp4o\n"
        )

    def test_extra_dependencies(self) -> None:
        text = render_manifest("app", Dependencies(names=("foo", "bar")))
        assert "  buildDepends: mirage, foo, bar\n" in text

    def test_mirage_not_repeated(self) -> None:
        text = render_manifest("app", Dependencies(names=("mirage", "foo")))
        assert "  buildDepends: mirage, foo\n" in text


class TestRenderMain:
    def test_fragment_order(self, dhcp_descriptor: Path) -> None:
        text = render_main(load_app_config(dhcp_descriptor))
        assert text.startswith("(* Generated by unikit *)\n")
        assert text.index("let ip = `DHCP") < text.index("let main () =")
        assert text.index("let main () =") < text.index("OS.Main.run")


class TestSourceSynthesizer:
    def test_end_to_end(self, dhcp_descriptor: Path) -> None:
        config = load_app_config(dhcp_descriptor)
        result = SourceSynthesizer(config).generate()

        main_ml = dhcp_descriptor.parent / "main.ml"
        manifest = dhcp_descriptor.parent / "main.obuild"
        assert result.files_created == [config.main_path, config.manifest_path]
        assert "let ip = `DHCP" in main_ml.read_text()
        assert "    Start mgr interface id" in main_ml.read_text()
        assert "buildDepends: mirage, foo, bar" in manifest.read_text()

    def test_rerun_is_deterministic_and_backs_up_once(self, dhcp_descriptor: Path) -> None:
        config = load_app_config(dhcp_descriptor)
        out = dhcp_descriptor.parent

        first = SourceSynthesizer(config).generate()
        manifest_bytes = (out / "main.obuild").read_bytes()
        main_bytes = (out / "main.ml").read_bytes()
        assert first.backups == []

        second = SourceSynthesizer(config).generate()
        assert (out / "main.obuild").read_bytes() == manifest_bytes
        assert second.backups == [config.output_dir / "main.ml.save"]
        assert (out / "main.ml.save").read_bytes() == main_bytes

        SourceSynthesizer(config).generate()
        assert not (out / "main.ml.save.save").exists()
        assert sorted(p.name for p in out.iterdir()) == [
            "app.conf",
            "main.ml",
            "main.ml.save",
            "main.obuild",
        ]

    def test_backup_keeps_user_edits(self, dhcp_descriptor: Path) -> None:
        main_ml = dhcp_descriptor.parent / "main.ml"
        main_ml.write_text("(* hand written *)\n")
        SourceSynthesizer(load_app_config(dhcp_descriptor)).generate()
        assert (dhcp_descriptor.parent / "main.ml.save").read_text() == "(* hand written *)\n"

    def test_http_main_without_listener_warns(self, write_descriptor) -> None:
        path = write_descriptor("main-http: Serve\n")
        result = SourceSynthesizer(load_app_config(path)).generate()
        assert len(result.warnings) == 1
        assert "http-port" in result.warnings[0]
