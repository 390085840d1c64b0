from ispy.app import run

run()
