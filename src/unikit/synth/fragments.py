"""
Source fragments for the generated entry-point module.

Every renderer is a pure function of one subsystem model and returns a
block of OCaml text. Only the entry-point fragment refers to names bound
by other fragments: ``ip`` from the network block and ``listen_port`` /
``listen_address`` from the HTTP block.
"""

from __future__ import annotations

from ..core.models import (
    AppConfig,
    Dependencies,
    DhcpNetwork,
    FilesystemConfig,
    HttpListener,
    HttpMain,
    IpMain,
    StaticNetwork,
)

HEADER = "(* Generated by unikit *)"
BASE_DEPENDENCY = "mirage"
MANIFEST_VERSION = "0.0.0"


def ocaml_string(value: str) -> str:
    """Quote *value* as an OCaml string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _block(*lines: str) -> str:
    return "".join(f"{line}\n" for line in lines)


def render_header() -> str:
    return _block(HEADER, "")


def render_filesystem(fs: FilesystemConfig) -> str:
    return _block(*(f"open Filesystem_{mount.name}" for mount in fs.mounts), "")


def render_network(network: DhcpNetwork | StaticNetwork) -> str:
    if isinstance(network, DhcpNetwork):
        return _block("let ip = `DHCP", "")
    return _block(
        'let get = function Some x -> x | None -> failwith "Bad IP!"',
        "let ip = `IPv4 (",
        f"  get (Net.Nettypes.ipv4_addr_of_string {ocaml_string(network.address)}),",
        f"  get (Net.Nettypes.ipv4_addr_of_string {ocaml_string(network.netmask)}),",
        f"  [get (Net.Nettypes.ipv4_addr_of_string {ocaml_string(network.gateway)})]",
        ")",
        "",
    )


def render_http(http: HttpListener | None) -> str:
    if http is None:
        return ""
    if http.bind_address is None:
        address = "let listen_address = None"
    else:
        address = (
            "let listen_address = Net.Nettypes.ipv4_addr_of_string "
            f"{ocaml_string(http.bind_address)}"
        )
    return _block(f"let listen_port = {http.port}", address, "")


def _render_http_main(main: HttpMain) -> list[str]:
    return [
        "let main () =",
        "  let spec = Cohttp_lwt_mirage.Server.({",
        f"    callback    = {main.symbol};",
        "    conn_closed = (fun _ () -> ());",
        "  }) in",
        "  Net.Manager.create (fun mgr interface id ->",
        '    Printf.eprintf "listening to HTTP on port %d\\n" listen_port;',
        "    Net.Manager.configure interface ip >>",
        "    Cohttp_lwt_mirage.listen mgr (listen_address, listen_port) spec",
        "  )",
    ]


def _render_ip_main(main: IpMain) -> list[str]:
    return [
        "let main () =",
        "  Net.Manager.create (fun mgr interface id ->",
        "    Net.Manager.configure interface ip >>",
        f"    {main.symbol} mgr interface id",
        "  )",
    ]


def render_entry_point(entry_point: IpMain | HttpMain) -> str:
    """Render ``main`` and the final ``OS.Main.run`` call."""
    if isinstance(entry_point, HttpMain):
        lines = _render_http_main(entry_point)
    else:
        lines = _render_ip_main(entry_point)
    return _block(*lines, "", "let () = OS.Main.run (main ())")


def render_main(config: AppConfig) -> str:
    """Assemble the whole entry-point module in its fixed fragment order."""
    return "".join(
        [
            render_header(),
            render_filesystem(config.filesystem),
            render_network(config.network),
            render_http(config.http),
            render_entry_point(config.entry_point),
        ]
    )


def render_manifest(name: str, dependencies: Dependencies) -> str:
    """Render the obuild manifest for the application."""
    extra = [dep for dep in dependencies.names if dep != BASE_DEPENDENCY]
    depends = ", ".join([BASE_DEPENDENCY, *extra])
    return _block(
        "obuild-ver: 1",
        f"name: {name}",
        f"version: {MANIFEST_VERSION}",
        "",
        f"executable {name}",
        "  main: main.ml",
        f"  buildDepends: {depends}",
        "  pp: camlp4o",
    )
