import os
import numpy as np


class Writer:
    """
    Routes the output of a VUMPS run. Every line goes to the console
    (unless silenced); if the run was given an output directory, lines are
    also appended to a log file there and each iteration's numbers become
    a row of a whitespace separated data table.

    MEMBERS
    -------
    self.directory: The output directory, or None for console only.
    self.console_file: Log file path, or None.
    self.data_file : Data table path, or None.

    PUBLIC METHODS
    --------------
    write: Echo a line to console and log it.
    data_write: Append one row to the data table.
    """
    def __init__(self, dirpath=None, consolefilename="console_output.txt",
                 datafilename="data.txt", headers=None):
        """
        PARAMETERS
        ----------
        dirpath: Output directory, created if missing. Files already
                 there with the same names are overwritten. With None the
                 Writer only prints.
        consolefilename: Name of the log file inside dirpath.
        datafilename : Name of the data table inside dirpath.
        headers  : Column names. The table opens with one comment line
                   per column, e.g. headers=["N", "E"] gives
                   # [0] = N
                   # [1] = E
                   so that np.loadtxt skips them and
                   np.loadtxt(datafile)[:, 1] is the E column.
        """
        self.directory = dirpath
        self.console_file = None
        self.data_file = None
        if dirpath is None:
            return

        os.makedirs(dirpath, exist_ok=True)
        self.console_file = os.path.join(dirpath, consolefilename)
        self.data_file = os.path.join(dirpath, datafilename)
        with open(self.console_file, "w"):
            pass

        if headers is None:
            headers = []
        preamble = ["# [{}] = {}\n".format(i, name)
                    for i, name in enumerate(headers)]
        with open(self.data_file, "w") as f:
            f.writelines(preamble)

    def write(self, outstring, verbose=True):
        """
        Prints outstring if verbose, and logs it regardless.
        """
        if verbose:
            print(outstring)
        if self.console_file is None:
            return
        with open(self.console_file, "a") as f:
            f.write(outstring + "\n")

    def data_write(self, row):
        """
        Appends the numbers in row, flattened, as one line of the table.
        """
        if self.data_file is None:
            return
        row = np.asarray(row).reshape((1, -1))
        with open(self.data_file, "ab") as f:
            np.savetxt(f, row)
