from qrscan.cli import main

main()
