from box_annotation.cli import main

main()
