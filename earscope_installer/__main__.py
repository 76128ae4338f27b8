from earscope_installer.commands import cli

if __name__ == "__main__":
    cli()
