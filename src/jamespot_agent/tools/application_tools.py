"""Application (module) management tools."""

from typing import List

from pydantic import Field

from jamespot_agent.tools import (
    NoArgs,
    ToolArgs,
    ToolDescriptor,
)
from jamespot_agent.tools.support import (
    ToolContext,
    backend_call,
    call_backend,
    envelope_output,
    run_tool,
    trace_api_response,
)


class HookArgs(ToolArgs):
    hook: str = Field(..., description="Hook Name.")


def build_application_tools(ctx: ToolContext) -> List[ToolDescriptor]:
    """Create all application-related tools."""

    async def toggle_install(hook: str, install: bool) -> str | None:
        """Run the legacy install page; returns an error string or ``None``."""
        csrf = await backend_call(ctx, "network.tokenCSRF")
        if not csrf.ok:
            return envelope_output(csrf, "Failed to get CSRF token")
        response = await ctx.client.fetch(
            "/",
            params={
                "action": "manageApps_install",
                "name": hook,
                "install": 1 if install else 0,
                "tokenCSRF": csrf.result,
            },
        )
        trace_api_response(ctx, "manageApps_install", {"status": response.status_code})
        response.raise_for_status()
        return None

    async def list_applications(_: NoArgs) -> str:
        return await call_backend(
            ctx, "jamespot_list_applications", "application.list", failure="Failed to list applications"
        )

    async def install_application(args: HookArgs) -> str:
        async def body() -> str:
            error = await toggle_install(args.hook, install=True)
            if error:
                return error
            legacy = await ctx.client.fetch(
                "/",
                method="POST",
                params={"action": "manageApps_configure", "name": args.hook},
                data={"page": "update-config", "use": "1"},
            )
            trace_api_response(ctx, "manageApps_configure", {"status": legacy.status_code})
            result = await backend_call(
                ctx, "module.setConfiguration", {"moduleName": args.hook, "active": True, "accessRight": 0}
            )
            return envelope_output(
                result, "Failed to install application", lambda _: f"Application '{args.hook}' installed and activated"
            )

        return await run_tool(ctx, "jamespot_install_application", {"hook": args.hook}, body)

    async def uninstall_application(args: HookArgs) -> str:
        async def body() -> str:
            error = await toggle_install(args.hook, install=False)
            return error or f"Application '{args.hook}' uninstalled"

        return await run_tool(ctx, "jamespot_uninstall_application", {"hook": args.hook}, body)

    async def application_configuration(args: HookArgs) -> str:
        return await call_backend(
            ctx,
            "jamespot_application_configuration",
            "module.getConfiguration",
            {"moduleName": args.hook},
            failure="Failed to get applications configuration",
        )

    return [
        ToolDescriptor(
            "jamespot_list_applications",
            "List the applications available on the Jamespot platform, with their hook names and status.",
            NoArgs,
            list_applications,
        ),
        ToolDescriptor(
            "jamespot_install_application",
            'Install application. Application ID must be provided as a "hook" name.',
            HookArgs,
            install_application,
        ),
        ToolDescriptor(
            "jamespot_uninstall_application",
            'Uninstall application. Application ID must be provided as a "hook" name.',
            HookArgs,
            uninstall_application,
        ),
        ToolDescriptor(
            "jamespot_application_configuration",
            'Get the configuration of an application. Application ID must be provided as a "hook" name.',
            HookArgs,
            application_configuration,
        ),
    ]
