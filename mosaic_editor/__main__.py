from mosaic_editor.app import main

main()
