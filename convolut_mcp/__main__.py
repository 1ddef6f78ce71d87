from convolut_mcp.cli import cli_main

cli_main()
