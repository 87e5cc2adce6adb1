from pluginmapper.cli import main

main()
